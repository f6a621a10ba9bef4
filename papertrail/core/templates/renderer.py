from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, StrictUndefined

from papertrail.utils.errors import FormatterError

BUILTIN_TEMPLATE_DIR = Path(__file__).parent


class TemplateRenderer:
    """
    Renders the prompt and log-entry templates. Templates found in a custom
    directory shadow the built-in ones of the same name.
    """

    def __init__(self, template_dir: Optional[str] = None):
        search_path = [FileSystemLoader(str(BUILTIN_TEMPLATE_DIR))]
        if template_dir:
            search_path.insert(0, FileSystemLoader(template_dir))
        try:
            self.env = Environment(
                loader=ChoiceLoader(search_path),
                trim_blocks=True,
                lstrip_blocks=True,
                undefined=StrictUndefined,
                autoescape=False,
            )
        except Exception as e:
            raise FormatterError(f"Failed to initialize Jinja2 environment: {e}") from e

    def render(self, template_name: str, **values: Any) -> str:
        try:
            template = self.env.get_template(template_name)
            return template.render(**values)
        except Exception as e:
            raise FormatterError(f"Failed to render template {template_name}: {e}") from e
