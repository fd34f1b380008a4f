"""
Permission Service (RBAC)

Define o que cada role pode ver e fazer.
Toda checagem de acesso passa por aqui, em vez de ifs espalhados nas rotas.
"""

from typing import Optional, Tuple
from sqlalchemy import ColumnElement

from leaddesk.domain.entities import User, Lead, UserRole, LeadStatus
from leaddesk.domain.errors import AuthorizationError


class PermissionService:
    """
    RBAC - Tabela de capacidades por role.

    - actions: o que o role pode executar
    - lead_visibility: coluna do Lead que precisa ser o próprio usuário
      (None = vê todos os leads)

    Examples:
        permissions.require(user, "assign_manager", "Só o admin pode atribuir gestor")

        scope = permissions.lead_scope(user)
        leads = await crm_store.list_leads(db, scope, status="NEW")
    """

    ROLE_PERMISSIONS = {
        UserRole.ADMIN: {
            "actions": [
                "list_all_users",
                "create_any_user",
                "manage_users",
                "assign_manager",
                "assign_executive",
                "edit_closed_leads",
                "view_team_performance",
            ],
            "lead_visibility": None,
        },
        UserRole.MANAGER: {
            "actions": [
                "list_team",
                "create_executive",
                "assign_executive",  # só nos próprios leads
                "edit_closed_leads",
                "view_team_performance",
            ],
            "lead_visibility": "assigned_manager_id",
        },
        UserRole.EXECUTIVE: {
            "actions": [],
            "lead_visibility": "assigned_executive_id",
        },
    }

    # Status em que o lead só é editado por quem tem edit_closed_leads
    LOCKED_STATUSES = (LeadStatus.CONVERTED.value, LeadStatus.CLOSED.value)

    def _role_perms(self, user: User) -> dict:
        try:
            role = UserRole(user.role)
        except ValueError:
            # Role inválido não pode nada
            return {"actions": [], "lead_visibility": "__none__"}
        return self.ROLE_PERMISSIONS[role]

    # ==========================================
    # AÇÕES
    # ==========================================

    def can_perform_action(self, user: User, action: str) -> bool:
        return action in self._role_perms(user)["actions"]

    def require(self, user: User, action: str, message: str = "Acesso negado") -> None:
        if not self.can_perform_action(user, action):
            raise AuthorizationError(message)

    # ==========================================
    # LEADS
    # ==========================================

    def lead_scope(self, user: User) -> list[ColumnElement[bool]]:
        """Condições SQL que restringem os leads visíveis ao usuário."""
        column_name = self._role_perms(user)["lead_visibility"]

        if column_name is None:
            return []

        if column_name == "__none__":
            return [Lead.id.is_(None)]

        return [getattr(Lead, column_name) == user.id]

    def can_view_lead(self, user: User, lead: Lead) -> bool:
        column_name = self._role_perms(user)["lead_visibility"]

        if column_name is None:
            return True

        if column_name == "__none__":
            return False

        return getattr(lead, column_name) == user.id

    def ensure_can_view_lead(self, user: User, lead: Lead) -> None:
        if not self.can_view_lead(user, lead):
            raise AuthorizationError("Acesso negado a este lead")

    def can_assign_executive(self, user: User, lead: Lead) -> bool:
        """Admin em qualquer lead; gestor só no lead que é dele."""
        return self.can_perform_action(user, "assign_executive") and self.can_view_lead(user, lead)

    def ensure_can_update_lead(self, user: User, lead: Lead, updates: dict) -> None:
        """
        Regras da edição genérica (PUT /leads/{id}).

        Troca de responsável só com a permissão de atribuição correspondente;
        o caminho certo para isso são os endpoints assign-manager/assign-executive.
        """
        if not self.can_view_lead(user, lead):
            raise AuthorizationError("Lead não pertence a você")

        if lead.status in self.LOCKED_STATUSES and not self.can_perform_action(user, "edit_closed_leads"):
            raise AuthorizationError("Lead convertido/fechado não pode ser editado")

        if (
            "assigned_manager_id" in updates
            and updates["assigned_manager_id"] != lead.assigned_manager_id
            and not self.can_perform_action(user, "assign_manager")
        ):
            raise AuthorizationError("Sem permissão para trocar o gestor do lead")

        if (
            "assigned_executive_id" in updates
            and updates["assigned_executive_id"] != lead.assigned_executive_id
            and not self.can_assign_executive(user, lead)
        ):
            raise AuthorizationError("Sem permissão para trocar o executivo do lead")

    # ==========================================
    # USUÁRIOS
    # ==========================================

    def user_list_filters(
        self,
        user: User,
        role: Optional[str] = None,
        manager_id: Optional[int] = None,
    ) -> Tuple[Optional[str], Optional[int]]:
        """
        Filtros efetivos da listagem de usuários.

        Admin usa os filtros pedidos; gestor sempre vê só a própria equipe.
        """
        if self.can_perform_action(user, "list_all_users"):
            return role, manager_id

        if self.can_perform_action(user, "list_team"):
            return UserRole.EXECUTIVE.value, user.id

        raise AuthorizationError("Sem permissão para listar usuários")

    def resolve_new_user(
        self,
        user: User,
        role: str,
        manager_id: Optional[int] = None,
    ) -> Tuple[str, Optional[int]]:
        """
        Role e gestor do usuário a ser criado.

        Gestor só cria executivo, e sempre para a própria equipe.
        """
        if self.can_perform_action(user, "create_any_user"):
            return role, manager_id if role == UserRole.EXECUTIVE.value else None

        if self.can_perform_action(user, "create_executive"):
            return UserRole.EXECUTIVE.value, user.id

        raise AuthorizationError("Sem permissão para criar usuários")


permissions = PermissionService()
