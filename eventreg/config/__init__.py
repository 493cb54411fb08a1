from .settings import Settings, ConfigurationError, get_settings
