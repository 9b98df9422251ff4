from wp_starter.steps.base import BaseStep
from wp_starter.steps.registry import default_steps
from wp_starter.steps.wp_cli import WpCliCommandsStep

__all__ = ["BaseStep", "WpCliCommandsStep", "default_steps"]
