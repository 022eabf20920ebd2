"""Scoped throttle that resolves its rate from settings on every request.

DRF's ScopedRateThrottle snapshots ``DEFAULT_THROTTLE_RATES`` at import time;
reading it lazily lets ``override_settings`` change rates in tests.
"""

from django.conf import settings
from rest_framework.throttling import AnonRateThrottle, ScopedRateThrottle, UserRateThrottle


class SettingsScopedRateThrottle(ScopedRateThrottle):
    def get_rate(self):
        rf = getattr(settings, "REST_FRAMEWORK", {})
        rates = rf.get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)


DEFAULT_THROTTLES = [SettingsScopedRateThrottle, UserRateThrottle, AnonRateThrottle]
