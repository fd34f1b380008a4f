"""manager executives mapping

Revision ID: 20240415_001
Revises: 20240301_001
Create Date: 2024-04-15 09:00:00

Um executivo passa a poder atender mais de um gestor.
O vínculo antigo (users.manager_id) vira linha em manager_executives.
"""
from alembic import op
import sqlalchemy as sa

revision = '20240415_001'
down_revision = '20240301_001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('manager_executives',
        sa.Column('manager_id', sa.Integer(), nullable=False),
        sa.Column('executive_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['manager_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['executive_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('manager_id', 'executive_id')
    )

    op.execute(sa.text("""
        INSERT INTO manager_executives (manager_id, executive_id, created_at)
        SELECT manager_id, id, created_at
        FROM users
        WHERE manager_id IS NOT NULL AND role = 'EXECUTIVE'
    """))

    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('manager_id')


def downgrade():
    with op.batch_alter_table('users') as batch_op:
        batch_op.add_column(sa.Column('manager_id', sa.Integer(), nullable=True))

    # Volta só um gestor por executivo (o de menor id)
    op.execute(sa.text("""
        UPDATE users
        SET manager_id = (
            SELECT MIN(me.manager_id)
            FROM manager_executives me
            WHERE me.executive_id = users.id
        )
        WHERE role = 'EXECUTIVE'
    """))

    op.drop_table('manager_executives')
