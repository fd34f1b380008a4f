"""Regras de negócio independentes de infraestrutura."""
