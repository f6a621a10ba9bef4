from papertrail.core.templates.renderer import TemplateRenderer

__all__ = ["TemplateRenderer"]
