"""
Configuration management for the legal clipping service.

Handles loading and accessing configuration from YAML files and environment variables.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

AUTHORS = [
    "Flávio Amaral Garcia",
    "Ronny Charles",
    "Joel de Menezes Niebuhr",
    "Jorge Jacoby Fernandes",
    "Jessé Torres",
    "Maria Sylvia di Pietro",
]


class Config:
    """Configuration manager for the clipping service."""

    # Default configuration values
    DEFAULTS: Dict[str, Any] = {
        "paths": {
            "base_dir": None,  # Set dynamically
            "reports": "reports",
            "logs": "logs",
        },
        "http": {
            "timeout": 15,
            "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "max_items": 5,
        },
        "cache": {
            "ttl": 3600,
            "max_size": 50,
        },
        "backoff": {
            "max_attempts": 3,
            "base_delay": 1.0,
            "max_delay": 10.0,
            "linear_delay": 2.0,
        },
        "search": {
            "endpoint": "https://api.perplexity.ai/chat/completions",
            "model": "sonar",
            "max_tokens": 2000,
            "max_prompt_chars": 2000,
            "max_domains": 20,
            "timeout": 30,
            "system_prompt": "Assistente especialista em licitações. Seja objetivo e direto.",
            "authors": AUTHORS,
            "domain_groups": {
                "pncp": ["pncp.gov.br"],
                "compras": ["comprasnet.gov.br", "compras.sp.gov.br", "gov.br/compras"],
                "tribunais": ["tcu.gov.br", "tce.sp.gov.br", "agu.gov.br", "stj.jus.br", "stf.jus.br"],
                "legislacao": ["planalto.gov.br", "in.gov.br", "senado.leg.br"],
                "periodicos": ["zenite.com.br", "ronnycharles.com.br", "jota.info", "conjur.com.br"],
            },
        },
        # Report sections, rendered in this order
        "sections": [
            {
                "id": "pncp",
                "label": "📋 LICITAÇÕES PNCP",
                "type": "search",
                "prompt": "Liste licitações PNCP últimas 24h: modalidades especiais, valor > 100M ou grandes projetos. Formato: • Título (data) – Órgão, Valor, Link.",
                "domain_groups": ["pncp"],
            },
            {
                "id": "compras",
                "label": "🛒 COMPRAS.SP",
                "type": "search",
                "prompt": "Liste comunicados SGGD/SP, ComprasNet últimas 24h: sistemas, Lei 14.133, índices. Formato: • Título (data) – Portal, Link.",
                "domain_groups": ["compras"],
            },
            {
                "id": "atos",
                "label": "📑 ATOS NORMATIVOS",
                "type": "search",
                "prompt": "Liste atos normativos Lei 14.133 últimas 24h: INs, Decretos, Portarias. Formato: • Título (data) – Órgão, Link DOE/DOU.",
                "domain_groups": ["legislacao"],
            },
            {
                "id": "tcu_informativo",
                "label": "📘 TCU INFORMATIVO",
                "type": "feed",
                "name": "TCU Informativo",
                "cache_key": "tcu-info",
                "show_summary": True,
                "urls": [
                    "https://portal.tcu.gov.br/RSS/informativo-de-licitacoes-e-contratos.xml",
                    "https://portal.tcu.gov.br/RSS/boletim-de-jurisprudencia.xml",
                ],
            },
            {
                "id": "tcu_boletim",
                "label": "📗 TCU BOLETIM",
                "type": "feed",
                "name": "TCU Boletim",
                "cache_key": "tcu-boletim",
                "urls": ["https://portal.tcu.gov.br/RSS/boletim-de-jurisprudencia.xml"],
            },
            {
                "id": "tcu_noticias",
                "label": "🟣 TCU NOTÍCIAS",
                "type": "scrape",
                "name": "TCU",
                "url": "https://portal.tcu.gov.br/imprensa/noticias",
                "selectors": {"container": ".noticia-item", "title": "h2"},
            },
            {
                "id": "tcesp_boletim",
                "label": "📄 TCE-SP BOLETIM",
                "type": "feed",
                "name": "TCE-SP Boletim",
                "cache_key": "tcesp-boletim",
                "urls": [
                    "https://www.tce.sp.gov.br/rss/boletim-jurisprudencia",
                    "https://www.tce.sp.gov.br/rss/boletim",
                ],
            },
            {
                "id": "tcesp_noticias",
                "label": "🟦 TCE-SP NOTÍCIAS",
                "type": "scrape",
                "name": "TCE-SP",
                "url": "https://www.tce.sp.gov.br/noticias",
                "selectors": {"container": ".noticia-item", "title": "h2"},
            },
            {
                "id": "decisoes",
                "label": "⚖️ DECISÕES JUDICIAIS",
                "type": "search",
                "prompt": "Liste decisões judiciais licitações/contratos últimas 24h: STF, STJ, TJs, TCU. Formato: • Título (data) – Tribunal, Link.",
                "domain_groups": ["tribunais"],
                "domains": ["jota.info", "conjur.com.br"],
            },
            {
                "id": "eventos",
                "label": "🎓 EVENTOS",
                "type": "search",
                "prompt": "Liste eventos licitações próximos 180 dias com: {authors}. Formato: • Nome (data) – Instituição, Link.",
                "domain_groups": ["periodicos"],
            },
            {
                "id": "artigos",
                "label": "📰 ARTIGOS",
                "type": "search",
                "prompt": "Liste artigos últimas 24h de: {authors}. Formato: • Título (data) – Autor, Link.",
                "domain_groups": ["periodicos"],
            },
        ],
        "filter": {
            # Section ids to scan; empty means the whole report
            "sections": [],
            "rules": {
                "pregao": {"required": ["pregão"], "with": ["edital", "termo de referência"]},
                "dispensa": {"required": ["dispensa"], "with": ["justificativa", "parecer jurídico"]},
                "ms": {"required": ["mandado de segurança"], "with": ["licitação", "desclassificação"]},
            },
        },
        "delivery": {
            "transport": "sendgrid",
            "sendgrid_endpoint": "https://api.sendgrid.com/v3/mail/send",
            "sender_name": "Clipping NLC/PGE/SP",
            "subject": "📡 Clipping Executivo – {date}",
            "max_attempts": 3,
            "retry_delay": 2.0,
            "timeout": 30,
            "smtp_port": 587,
        },
        "scheduler": {
            "enabled": True,
            "cron": "0 7 * * *",
            "timezone": "America/Sao_Paulo",
            "misfire_grace_time": 3600,
            # Seconds after startup for a one-off run; null disables it
            "startup_run_delay": None,
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file_enabled": True,
        },
    }

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}
    _base_dir: Optional[Path] = None

    def __new__(cls) -> "Config":
        """Singleton pattern to ensure single configuration instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """Initialize configuration if not already done."""
        if self._initialized:
            return
        self._initialized = True
        self._config = copy.deepcopy(self.DEFAULTS)
        self._base_dir = self._find_base_dir()
        self._load_config_file()

    def _find_base_dir(self) -> Path:
        """Find the base directory of the clipping installation."""
        env_base = os.environ.get("CLIPPING_BASE_DIR")
        if env_base:
            return Path(env_base)

        # scripts/clipping/config.py -> scripts/clipping -> scripts -> base
        current_file = Path(__file__).resolve()
        return current_file.parent.parent.parent

    def _load_config_file(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_path = self._base_dir / "config" / "config.yaml"
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
                self._merge_config(file_config)

        self._config["paths"]["base_dir"] = str(self._base_dir)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        for key, value in new_config.items():
            if key in self._config and isinstance(self._config[key], dict) and isinstance(value, dict):
                self._config[key].update(value)
            else:
                self._config[key] = value

    @property
    def base_dir(self) -> Path:
        """Get the base directory path."""
        return self._base_dir

    @property
    def reports_dir(self) -> Path:
        """Directory where undelivered reports are saved."""
        return self._base_dir / self._config["paths"]["reports"]

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self._base_dir / self._config["paths"]["logs"]

    @property
    def sections(self) -> List[Dict[str, Any]]:
        """Report section declarations in report order."""
        return self._config["sections"]

    @property
    def recipients(self) -> List[str]:
        """Report recipients from EMAIL_TO, falling back to delivery.recipients."""
        raw = os.environ.get("EMAIL_TO")
        if raw:
            return [addr.strip() for addr in raw.split(",") if addr.strip()]
        return list(self.get("delivery.recipients", []) or [])

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Supports dot notation for nested keys (e.g., 'cache.ttl').
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = copy.deepcopy(self.DEFAULTS)
        self._load_config_file()


# Global configuration instance
config = Config()
