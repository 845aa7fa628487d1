"""
Progressive web app assets: per-store manifest and the offline service worker.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from online_catalog.config import get_settings
from online_catalog.models.catalog import Catalog

DEFAULT_NAME = "كتالوج"
DEFAULT_DESCRIPTION = "منصة إنشاء الكتالوجات الإلكترونية"
BACKGROUND_COLOR = "#000000"
THEME_COLOR = "#00D1C9"
DEFAULT_ICON = "/icon.png"


def _icons(src: str, purpose: Optional[str] = None) -> list[dict[str, str]]:
    icons = []
    for size in ("192x192", "512x512"):
        icon = {"src": src, "sizes": size, "type": "image/png"}
        if purpose:
            icon["purpose"] = purpose
        icons.append(icon)
    return icons


def default_manifest(slug: str) -> dict[str, Any]:
    return {
        "name": DEFAULT_NAME,
        "short_name": DEFAULT_NAME,
        "description": DEFAULT_DESCRIPTION,
        "start_url": f"/{slug}",
        "display": "standalone",
        "background_color": BACKGROUND_COLOR,
        "theme_color": THEME_COLOR,
        "orientation": "portrait-primary",
        "icons": _icons(DEFAULT_ICON),
    }


def build_manifest(slug: str, catalog: Optional[Catalog]) -> dict[str, Any]:
    if catalog is None:
        return default_manifest(slug)
    store_name = catalog.store_name
    manifest = default_manifest(slug)
    manifest.update(
        name=store_name,
        short_name=store_name,
        description=catalog.description or f"كتالوج {store_name} الإلكتروني",
        icons=_icons(catalog.logo_url, "any maskable") if catalog.logo_url else _icons(DEFAULT_ICON),
    )
    return manifest


_SERVICE_WORKER = """// Basic service worker: cache-first for a fixed asset list.
const CACHE_NAME = %(cache_name)s;
const urlsToCache = %(urls)s;

self.addEventListener('install', (event) => {
  event.waitUntil(caches.open(CACHE_NAME).then((cache) => cache.addAll(urlsToCache)));
  self.skipWaiting();
});

self.addEventListener('fetch', (event) => {
  if (event.request.method !== 'GET') {
    return;
  }
  event.respondWith(
    caches.match(event.request).then((cached) => {
      if (cached) {
        return cached;
      }
      return fetch(event.request.clone()).then((response) => {
        if (!response || response.status !== 200 || response.type !== 'basic') {
          return response;
        }
        const responseToCache = response.clone();
        return caches.open(CACHE_NAME).then((cache) => {
          cache.put(event.request, responseToCache);
          return response;
        });
      });
    })
  );
});

self.addEventListener('activate', (event) => {
  event.waitUntil(
    caches.keys().then((names) =>
      Promise.all(names.filter((name) => name !== CACHE_NAME).map((name) => caches.delete(name)))
    )
  );
  self.clients.claim();
});
"""


def service_worker_script() -> str:
    settings = get_settings()
    return _SERVICE_WORKER % {
        "cache_name": json.dumps(settings.service_worker_cache_name),
        "urls": json.dumps(settings.service_worker_urls),
    }
