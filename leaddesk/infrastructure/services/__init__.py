"""
INFRASTRUCTURE SERVICES
========================

Serviços de infraestrutura do LeadDesk.

Organização:
- crm_store: persistência (usuários, leads, notas, notificações, histórico)
- auth_service: senha, JWT e login por portal
- distribution_service: distribuição de leads (rodízio / menor carga)
- notification_service: sino do portal
- dashboard_service: contadores do painel
"""
