from __future__ import annotations

from ..models import WEEK_DAYS, BusinessConfig
from ..permissions import Action, Module
from ..validation import ValidationError
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, WorkingSet
from .transaction_service import unit_of_work


class SettingsService:
    def __init__(self, store: KeyedStore, lock, policy: AuthorizationPolicy):
        self.store = store
        self.lock = lock
        self.policy = policy

    def get_config(self) -> BusinessConfig:
        return WorkingSet(self.store).config

    def save_config(self, actor, data: dict) -> BusinessConfig:
        """Replace the business profile wholesale; missing fields fall back to defaults."""
        self.policy.require(actor, Module.SETTINGS, Action.EDIT)
        if not isinstance(data, dict):
            raise ValidationError("config must be an object")
        config = BusinessConfig.from_dict(data)
        if not isinstance(config.opening_hours, dict):
            raise ValidationError("openingHours must be an object")
        unknown = sorted(set(config.opening_hours) - set(WEEK_DAYS))
        if unknown:
            raise ValidationError(f"Unknown days in openingHours: {', '.join(unknown)}")

        with unit_of_work(self.store, self.lock) as working:
            working.replace(Collection.CONFIG, config)
        return config
