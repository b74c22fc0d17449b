# tradebot/common/base/base_config.py
# =============================================================================
# BaseConfig - Foundation for all tradebot configuration classes
#
# Pydantic v2 settings:
# - SettingsConfigDict (not the deprecated class Config)
# - Automatic .env file loading
# - Case-insensitive environment variables
# - SecretStr for sensitive values
#
# Usage:
#     class MyConfig(BaseConfig):
#         model_config = SettingsConfigDict(env_prefix="MY_")
#         api_key: SecretStr = SecretStr("")
# =============================================================================

from typing import Any, Dict

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class for all tradebot configs.

    Secrets Handling:
    - All sensitive fields (keys, tokens) should use SecretStr
    - SecretStr masks values in logs: SecretStr('**********')
    - Access raw value via .get_secret_value() when needed
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Convert config to dictionary.

        Args:
            mask_secrets: If True (default), SecretStr values are masked.
                         If False, raw values are exposed (use with caution).
        """
        if mask_secrets:
            return self.model_dump()

        data = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                data[field_name] = value.get_secret_value()
            else:
                data[field_name] = value
        return data

    def __repr__(self) -> str:
        """Safe repr that masks secrets."""
        class_name = self.__class__.__name__
        fields = []
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                fields.append(f"{field_name}=SecretStr('**********')")
            else:
                fields.append(f"{field_name}={value!r}")
        return f"{class_name}({', '.join(fields)})"
