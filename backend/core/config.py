"""
系统配置管理
统一管理所有配置项，支持环境变量覆盖
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from urllib.parse import quote_plus

# 获取backend目录的绝对路径
BACKEND_DIR = Path(__file__).parent.parent.resolve()
ENV_FILE = BACKEND_DIR / ".env"


class Settings(BaseSettings):
    """系统配置"""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # 应用信息
    app_name: str = "Blog CMS"
    app_version: str = "1.0.0"
    debug: bool = False

    # 数据库配置
    database_url: Optional[str] = None  # 完整连接串，设置后覆盖下面的分项配置
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "blog_cms"

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        encoded_user = quote_plus(self.db_user)
        encoded_pwd = quote_plus(self.db_password)
        return f"mysql+aiomysql://{encoded_user}:{encoded_pwd}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_sqlite(self) -> bool:
        return self.db_url.startswith("sqlite")

    # 博客配置
    blog_root_category_id: int = 1  # 根分类ID，不可删除
    blog_root_label: str = "根分类"
    blog_default_user_id: int = 1  # 未接入认证前，文章统一归属此用户
    blog_default_user_name: str = "佚名作者"
    blog_per_page: int = 10
    blog_max_per_page: int = 100
    blog_admin_per_page: int = 5

    # 请求日志
    slow_request_threshold: float = 1.0  # 超过该秒数记录为慢请求


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """
    获取配置单例
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reload_settings() -> Settings:
    """
    重新加载配置（环境变量变更后使用）
    """
    global _settings_instance
    _settings_instance = Settings()
    return _settings_instance
