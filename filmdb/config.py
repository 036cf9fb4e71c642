"""
配置模块 (Configuration Module)
==============================

从环境变量和 .env 文件加载应用配置：数据文件位置、保存格式、日志级别。
"""

import logging

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

SUPPORTED_OUTPUT_FORMATS = ("xls", "xlsx")


class Settings(BaseSettings):
    """
    应用配置类，继承自 Pydantic BaseSettings，支持从环境变量自动加载。

    所有字段均可通过带 FILMDB_ 前缀的环境变量覆盖，例如 FILMDB_DATA_FILE。

    属性:
        DATA_FILE: 目录工作簿路径，默认当前目录下的 data.xls
        OUTPUT_FORMAT: 保存格式，xls（默认，兼容旧版 Excel）或 xlsx
        LOG_LEVEL: 日志级别名称
    """
    DATA_FILE: str = "data.xls"
    OUTPUT_FORMAT: str = "xls"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="FILMDB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("OUTPUT_FORMAT")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """校验保存格式为 xls 或 xlsx（大小写不敏感）。"""
        normalized = (v or "").strip().lower().lstrip(".")
        if normalized not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(
                f"OUTPUT_FORMAT must be one of {SUPPORTED_OUTPUT_FORMATS}, got {v!r}"
            )
        return normalized

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """校验日志级别为 logging 模块可识别的名称。"""
        normalized = (v or "").strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown LOG_LEVEL: {v!r}")
        return normalized


# 全局单例，避免重复加载配置
_settings_instance = None


def get_settings() -> Settings:
    """
    获取配置单例。

    首次调用时创建 Settings 实例并缓存，后续调用返回同一实例。
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """清除缓存的配置单例（环境变量变化后重新加载，主要供测试使用）。"""
    global _settings_instance
    _settings_instance = None
