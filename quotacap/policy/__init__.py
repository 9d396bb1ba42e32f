"""Quota cap policy: per-category clamping of the host's quota."""

from quotacap.policy.quota_cap import CapStatus, QuotaCapPolicy, validate_quota_value

__all__ = ["CapStatus", "QuotaCapPolicy", "validate_quota_value"]
