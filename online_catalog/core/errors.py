"""
Domain errors surfaced as localized user-facing messages.
Each error maps to one HTTP status and a short machine code; the handler renders
{"error": code, "message": message}.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from online_catalog.core.logging import get_logger

logger = get_logger(__name__)

# User-facing strings (Arabic storefront audience)
MESSAGES = {
    "unauthorized": "غير مصرح به",
    "invalid_data": "بيانات غير صالحة.",
    "catalog_not_found": "الكتالوج غير موجود",
    "catalog_exists": "لديك كتالوج بالفعل.",
    "catalog_name_taken": "اسم الكتالوج هذا مستخدم بالفعل.",
    "category_not_found": "الفئة غير موجودة.",
    "category_cycle": "لا يمكن جعل الفئة تابعة لنفسها أو لإحدى فئاتها الفرعية.",
    "subcategories_disabled": "الفئات الفرعية غير مفعلة لهذا الكتالوج.",
    "item_not_found": "المنتج غير موجود.",
    "variant_not_found": "الخيار غير موجود.",
    "image_not_found": "الصورة غير موجودة.",
    "file_too_large": "الحد الأقصى لحجم الصورة 5 ميغابايت.",
    "file_type": ".jpg, .jpeg, .png و .webp هي الملفات المقبولة.",
    "image_required": "يرجى اختيار صورة.",
    "logo_upload_failed": "فشل تحميل الشعار.",
    "cover_upload_failed": "فشل تحميل صورة الغلاف.",
    "image_upload_failed": "فشل تحميل الصورة.",
    "catalog_create_failed": "فشل إنشاء الكتالوج في قاعدة البيانات.",
    "limit_reached": "LIMIT_REACHED",
    "invalid_credentials_email": "البريد الإلكتروني أو كلمة المرور غير صحيحة",
    "invalid_credentials_phone": "رقم الهاتف أو كلمة المرور غير صحيحة",
    "email_not_confirmed": "يرجى تأكيد البريد الإلكتروني أولاً",
    "email_registered": "البريد الإلكتروني مسجل بالفعل",
    "phone_registered": "رقم الهاتف مسجل بالفعل",
    "invalid_link": "رابط إعادة تعيين كلمة المرور غير صحيح أو منتهي الصلاحية",
    "invalid_otp": "رمز التحقق غير صحيح أو منتهي الصلاحية",
    "not_found": "غير موجود",
    "invalid_confirmation": "رابط التأكيد غير صحيح أو منتهي الصلاحية",
    "required_fields": "جميع الحقول مطلوبة",
    "email_required": "البريد الإلكتروني مطلوب",
    "invalid_email": "البريد الإلكتروني غير صحيح",
    "invalid_phone": "رقم الهاتف غير صحيح",
    "password_mismatch": "كلمة المرور وتأكيد كلمة المرور لا يتطابقان",
    "invalid_slug": "يجب أن يحتوي الاسم على أحرف إنجليزية صغيرة وأرقام وشرطات فقط",
    "slug_length": "يجب أن يكون الاسم 3 أحرف على الأقل",
    "display_name_length": "يجب أن يكون اسم العرض بين 3 و 50 حرفًا",
    "invalid_theme": "المظهر غير معروف.",
    "invalid_plan": "الباقة غير معروفة.",
    "invalid_country_code": "رمز الدولة غير صحيح",
}


class CatalogError(Exception):
    """Base class: status_code + code + localized message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "invalid_data"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, **details: Any) -> None:
        if code is not None:
            self.code = code
        self.message = message or MESSAGES.get(self.code, MESSAGES["invalid_data"])
        self.details = details
        super().__init__(self.message)


class NotAuthorized(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class NotFound(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class InvalidInput(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_data"


class LimitReached(CatalogError):
    """Plan quota hit; clients show the upgrade prompt on this code."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "LIMIT_REACHED"

    def __init__(self, resource: str, limit: int) -> None:
        super().__init__(MESSAGES["limit_reached"], resource=resource, limit=limit)


class UploadFailed(CatalogError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upload_failed"


def first_error(exc: ValidationError) -> InvalidInput:
    """Only the first field error is reported back to the form."""
    errors = exc.errors()
    if not errors:
        return InvalidInput()
    err = errors[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return InvalidInput(err.get("msg") or MESSAGES["invalid_data"], field=field)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    logger.info("catalog_error %s: %s", exc.code, exc.message)
    content: dict[str, Any] = {"error": exc.code, "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)
