"""Kanban board columns and contract grouping."""

from typing import Iterable, List

from django.db.models import Q

from apps.accounts.models import User
from apps.contracts.models import ContractStatus, KanbanColumn

DEFAULT_COLUMNS = (
    {
        'title': 'Drafts',
        'statuses': [ContractStatus.DRAFT, ContractStatus.REQUEST_DRAFT],
        'color': '#6B7280',
    },
    {
        'title': 'Waiting for approval',
        'statuses': [ContractStatus.SUBMITTED, ContractStatus.PENDING_APPROVAL],
        'color': '#F59E0B',
    },
    {
        'title': 'In progress',
        'statuses': [
            ContractStatus.APPROVED,
            ContractStatus.IN_PROGRESS,
            ContractStatus.STEP_COMPLETED,
        ],
        'color': '#3B82F6',
    },
    {
        'title': 'With client',
        'statuses': [
            ContractStatus.SENT_TO_CLIENT,
            ContractStatus.EMAIL_VIEWED,
            ContractStatus.CONTRACT_GENERATED,
            ContractStatus.WAITING_FOR_SIGNATURE,
        ],
        'color': '#8B5CF6',
    },
    {
        'title': 'Signed',
        'statuses': [ContractStatus.SIGNED],
        'color': '#10B981',
    },
    {
        'title': 'Closed',
        'statuses': [ContractStatus.REJECTED, ContractStatus.LOST],
        'color': '#EF4444',
    },
)


def get_columns(user: User) -> List[dict]:
    """
    Active columns for the user.

    The user's own columns win over shared ones (no owner); with neither,
    the default layout is used.
    """
    queryset = KanbanColumn.objects.filter(is_active=True)
    columns = list(queryset.filter(user=user)) or list(queryset.filter(user__isnull=True))
    if not columns:
        return [
            dict(column, id=None, position=position, statuses=[str(s) for s in column['statuses']])
            for position, column in enumerate(DEFAULT_COLUMNS)
        ]
    return [
        {
            'id': column.id,
            'title': column.title,
            'statuses': list(column.statuses),
            'color': column.color,
            'position': column.position,
        }
        for column in columns
    ]


def build_kanban_board(*, contracts: Iterable, columns: List[dict]) -> List[dict]:
    """
    Group contracts into columns by status.

    A contract lands in the first column listing its status; contracts
    whose status no column lists are left out.
    """
    board = [dict(column, contracts=[]) for column in columns]
    by_status = {}
    for column in board:
        for status in column['statuses']:
            by_status.setdefault(status, column)

    for contract in contracts:
        column = by_status.get(contract.status)
        if column is not None:
            column['contracts'].append(contract)

    for column in board:
        column['count'] = len(column['contracts'])
    return board


def visible_columns(user: User):
    """Columns the user may edit: own ones, and shared ones for admins."""
    if user.is_admin:
        return KanbanColumn.objects.filter(Q(user=user) | Q(user__isnull=True))
    return KanbanColumn.objects.filter(user=user)
