"""LeadDesk - CRM de leads com distribuição Admin -> Gestor -> Executivo."""

__version__ = "0.1.0"
