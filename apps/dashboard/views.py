from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsStaffMember
from .analytics import DashboardQueries
from .serializers import (
    AdminStatsSerializer,
    ContractsStatsSerializer,
    TeamPerformanceSerializer,
)


@extend_schema(
    responses={200: AdminStatsSerializer},
    description="Headline numbers: contracts, merchants, revenue and 30-day growth.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def admin_stats(request):
    """Headline dashboard numbers - thin HTTP handler."""
    return Response(AdminStatsSerializer(DashboardQueries.admin_stats()).data)


@extend_schema(
    responses={200: ContractsStatsSerializer},
    description="Contract counts per status and pipeline value.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def contracts_stats(request):
    return Response(ContractsStatsSerializer(DashboardQueries.contracts_stats()).data)


@extend_schema(
    responses={200: TeamPerformanceSerializer(many=True)},
    description="Contracts, conversion and profit per active team.",
    tags=['dashboard'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def team_performance(request):
    return Response(TeamPerformanceSerializer(DashboardQueries.team_performance(), many=True).data)
