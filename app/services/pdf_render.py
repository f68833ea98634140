# app/services/pdf_render.py
"""
PDF -> PNG rasterization with poppler's command line tools.

`pdfinfo` reports the page count and `pdftoppm -png` writes one
`page-<n>.png` per page into the output directory.
"""
from dataclasses import dataclass
from typing import List
import logging
import os
import re
import subprocess

from app.config import settings

logger = logging.getLogger(__name__)

PAGES_RE = re.compile(r"Pages:\s+(\d+)", re.IGNORECASE)
PAGE_FILE_RE = re.compile(r"^page-(\d+)\.png$", re.IGNORECASE)


class PdfToolsMissing(RuntimeError):
    """pdfinfo / pdftoppm are not installed on this host."""


class PdfRenderError(RuntimeError):
    pass


@dataclass
class RenderedPage:
    page_number: int
    path: str


def looks_like_pdf(data: bytes) -> bool:
    return data[:4] == b"%PDF"


class PdfRenderer:
    def __init__(self, dpi: int = 120, timeout: float = 120, pdfinfo_cmd: str = "pdfinfo",
                 pdftoppm_cmd: str = "pdftoppm"):
        self.dpi = dpi
        self.timeout = timeout  # seconds, per command
        self.pdfinfo_cmd = pdfinfo_cmd
        self.pdftoppm_cmd = pdftoppm_cmd

    def _run(self, cmd: List[str]) -> str:
        logger.debug("[PDF] run: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise PdfToolsMissing(f"{cmd[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            logger.error("%s timed out after %ss", cmd[0], self.timeout)
            raise PdfRenderError(f"{cmd[0]} timed out") from e

        if proc.returncode != 0:
            logger.error("%s failed: %s", cmd[0], proc.stderr.decode("utf-8", "ignore"))
            raise PdfRenderError(f"{cmd[0]} failed")
        return proc.stdout.decode("utf-8", "ignore")

    def page_count(self, pdf_path: str) -> int:
        out = self._run([self.pdfinfo_cmd, pdf_path])
        match = PAGES_RE.search(out)
        if not match:
            raise PdfRenderError("Unable to determine PDF page count")
        return int(match.group(1))

    def render(self, pdf_path: str, output_dir: str) -> List[RenderedPage]:
        prefix = os.path.join(output_dir, "page")
        self._run([self.pdftoppm_cmd, "-png", "-r", str(self.dpi), pdf_path, prefix])

        pages = []
        for name in os.listdir(output_dir):
            match = PAGE_FILE_RE.match(name)
            if match:
                pages.append(RenderedPage(int(match.group(1)), os.path.join(output_dir, name)))
        pages.sort(key=lambda p: p.page_number)

        if not pages:
            raise PdfRenderError("No pages were rendered from the PDF")
        return pages


def get_pdf_renderer() -> PdfRenderer:
    return PdfRenderer(dpi=settings.render_dpi, timeout=settings.render_timeout)
