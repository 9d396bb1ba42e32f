"""Host-facing interception adapter."""

from quotacap.hooks.quota_hook import ActiveCategoryQuery, QuotaHook, no_active_category

__all__ = ["ActiveCategoryQuery", "QuotaHook", "no_active_category"]
