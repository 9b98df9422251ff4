from wp_starter.config.config import Config
from wp_starter.config.validator import Validator
from wp_starter.config.wp_cli_file_data import WpCliFileData

__all__ = ["Config", "Validator", "WpCliFileData"]
