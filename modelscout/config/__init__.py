from modelscout.config.config import Config

__all__ = ["Config"]
