import logging
import re

from resume_builder.app.api.routes.html_fragments import env
from resume_builder.app.api.routes.route_logic.resume_preview import ResumePreview

log = logging.getLogger(__name__)

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9]+")


def render_resume_print_html(preview: ResumePreview, auto_print: bool = True) -> str:
    """Render a resume preview as a standalone, printable HTML document.

    The document embeds its own stylesheet (template colours and layout tag)
    and, when `auto_print` is set, opens the browser print dialog on load so the
    user can print or save as PDF. No binary file is produced here.

    Args:
        preview (ResumePreview): The structured resume view.
        auto_print (bool): Whether to trigger the print dialog when the page loads.

    Returns:
        str: The complete HTML document.

    Notes:
        1. Renders the `export/resume_print.html` template with autoescaping.

    """
    _msg = "render_resume_print_html starting"
    log.debug(_msg)
    template = env.get_template("export/resume_print.html")
    html = template.render(preview=preview, auto_print=auto_print)
    _msg = "render_resume_print_html returning"
    log.debug(_msg)
    return html


def export_filename(preview: ResumePreview) -> str:
    """Build a download-safe file name from the resume owner's name."""
    if preview.placeholder is not None:
        return "resume.html"
    stem = _FILENAME_UNSAFE.sub("_", preview.name).strip("_")
    return f"{stem or 'resume'}_resume.html"
