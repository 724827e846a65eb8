"""Documents table and per-tenant unique key index

Revision ID: 001_documents
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_documents'
down_revision = None


def upgrade():
    # Create documents table
    op.create_table(
        'documents',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('collection', sa.String(64), nullable=False),
        sa.Column('cliente_id', sa.String(64), nullable=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_documents_collection', 'documents', ['collection'])
    op.create_index('ix_documents_cliente_id', 'documents', ['cliente_id'])
    op.create_index('idx_documents_collection_cliente', 'documents', ['collection', 'cliente_id'])

    # Create unique key index table
    op.create_table(
        'unique_keys',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('document_id', sa.String(32), sa.ForeignKey('documents.id'), nullable=False),
        sa.Column('collection', sa.String(64), nullable=False),
        sa.Column('scope', sa.String(64), nullable=False, server_default=''),
        sa.Column('field', sa.String(64), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
        sa.UniqueConstraint('collection', 'scope', 'field', 'value', name='uq_unique_keys_value'),
    )
    op.create_index('ix_unique_keys_document_id', 'unique_keys', ['document_id'])


def downgrade():
    op.drop_index('ix_unique_keys_document_id', 'unique_keys')
    op.drop_table('unique_keys')

    op.drop_index('idx_documents_collection_cliente', 'documents')
    op.drop_index('ix_documents_cliente_id', 'documents')
    op.drop_index('ix_documents_collection', 'documents')
    op.drop_table('documents')
