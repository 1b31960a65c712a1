# -*- coding: utf-8 -*-
"""Transactional mail: Jinja2 templates posted to an HTTP mail relay."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import Settings, settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class Mailer:
    """Renders the `subject`, `plain_body` and `html_body` blocks of a template and sends them.

    Without a relay URL the rendered message is logged and dropped, which is
    what development and the test suite run with.
    """

    def __init__(self, cfg: Settings) -> None:
        self.cfg = cfg
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, template_name: str, data: Dict[str, Any]) -> Dict[str, str]:
        template = self.env.get_template(template_name)
        context = template.new_context(dict(data))
        return {
            block: "".join(template.blocks[block](context)).strip()
            for block in ("subject", "plain_body", "html_body")
        }

    def send(self, recipient: str, template_name: str, data: Dict[str, Any]) -> None:
        message = self.render(template_name, data)
        if not self.cfg.mailer_url:
            logger.info("mail relay not configured; dropping %s to %s", template_name, recipient)
            return

        headers = {"Content-Type": "application/json"}
        if self.cfg.mailer_api_key:
            headers["Authorization"] = f"Bearer {self.cfg.mailer_api_key}"
        payload = {
            "from": self.cfg.mailer_sender,
            "to": recipient,
            "subject": message["subject"],
            "text": message["plain_body"],
            "html": message["html_body"],
        }
        with httpx.Client(timeout=self.cfg.mailer_timeout_s, follow_redirects=True) as client:
            resp = client.post(self.cfg.mailer_url, headers=headers, json=payload)
            resp.raise_for_status()
        logger.info("sent %s to %s", template_name, recipient)


mailer = Mailer(settings)
