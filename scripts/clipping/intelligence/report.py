"""
The composite clipping report and its text/HTML renderings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from jinja2 import Environment, select_autoescape

from clipping import __version__

HEADING = "═══ {label} ═══"

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>{{ title }}</title></head>
<body style="font-family:sans-serif;margin:0;">
  <div style="background:linear-gradient(135deg,#134252,#1a5666);color:white;padding:25px;text-align:center;">
    <h1>Clipping Executivo - Licitações &amp; Contratos</h1>
    <p>NLC/PGE/SP | {{ generated_at }}</p>
    <span style="background:#e8f5e9;color:#2e7d32;padding:4px 12px;border-radius:12px;font-size:12px;">
      📡 RSS + Scraping + IA
    </span>
  </div>
  <div style="padding:25px;">
    {% if matched_rules %}
    <div style="background:#e8f5e9;border-left:4px solid #4caf50;padding:15px;margin:20px 0;">
      <strong>🎯 Filtros: {{ matched_rules | join(', ') }}</strong>
    </div>
    {% endif %}
    <pre style="background:#f8f9fa;padding:20px;border-radius:6px;white-space:pre-wrap;font-size:13px;line-height:1.6;">{{ body }}</pre>
  </div>
  <div style="background:#f4f4f4;padding:18px;text-align:center;font-size:12px;color:#666;">
    v{{ version }} | Powered by Perplexity AI
  </div>
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
_template = _env.from_string(HTML_TEMPLATE)


@dataclass
class ReportSection:
    """One section of the report, in its declared position."""

    section_id: str
    label: str
    content: str
    failed: bool = False


@dataclass
class Report:
    """A finished report: sections in declared order plus filter matches."""

    sections: List[ReportSection] = field(default_factory=list)
    matched_rules: List[str] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)
    title: str = "Clipping NLC/PGE/SP"

    @property
    def section_map(self) -> Dict[str, str]:
        """Ordered mapping of section label to text."""
        return {s.label: s.content for s in self.sections}

    @property
    def failed_sections(self) -> List[str]:
        return [s.section_id for s in self.sections if s.failed]

    def text_for(self, section_ids: Optional[List[str]] = None) -> str:
        """Concatenate sections, optionally restricted to the given ids."""
        chosen = [s for s in self.sections if not section_ids or s.section_id in section_ids]
        return "\n\n".join(f"{HEADING.format(label=s.label)}\n{s.content}" for s in chosen)

    @property
    def text(self) -> str:
        return self.text_for()

    @property
    def banner(self) -> str:
        """Plain-text banner naming the matched rules, or ''."""
        if not self.matched_rules:
            return ""
        return f"🎯 Filtros: {', '.join(self.matched_rules)}"

    @property
    def document(self) -> str:
        """Full plain-text report with the banner on top when rules matched."""
        if self.banner:
            return f"{self.banner}\n\n{self.text}"
        return self.text

    def to_html(self) -> str:
        return _template.render(
            title=self.title,
            generated_at=self.generated_at.strftime("%d/%m/%Y %H:%M:%S"),
            matched_rules=self.matched_rules,
            body=self.text,
            version=__version__,
        )
