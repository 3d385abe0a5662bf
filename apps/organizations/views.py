from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsAdminOrReadOnlyStaff
from apps.accounts.serializers import UserPublicSerializer
from .models import Team
from .serializers import (
    OrganizationSerializer,
    OrganizationCreateSerializer,
    TeamSerializer,
    TeamCreateSerializer,
    TeamUpdateSerializer,
    TeamMemberActionSerializer,
)
from .services import (
    get_organizations_with_counts,
    create_organization,
    update_organization,
    delete_organization,
    create_team,
    update_team,
    delete_team,
    add_team_member,
    remove_team_member,
    get_team_members,
    # Exceptions
    OrganizationNotFoundError,
    TeamNotFoundError,
    InactiveOrganizationError,
    InvalidTeamMemberError,
    AlreadyTeamMemberError,
    NotTeamMemberError,
)


class OrganizationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class OrganizationViewSet(viewsets.ModelViewSet):
    """
    Organizations. Staff can read; only admins can write.

    Deleting an organization deletes its teams and detaches members.
    """

    serializer_class = OrganizationSerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnlyStaff]
    pagination_class = OrganizationPagination

    def get_queryset(self):
        queryset = get_organizations_with_counts()
        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('1', 'true', 'yes'))
        return queryset

    @extend_schema(request=OrganizationCreateSerializer, responses={201: OrganizationSerializer})
    def create(self, request, *args, **kwargs):
        serializer = OrganizationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        organization = create_organization(created_by=request.user, **serializer.validated_data)
        organization = self.get_queryset().get(id=organization.id)
        return Response(OrganizationSerializer(organization).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrganizationCreateSerializer, responses={200: OrganizationSerializer})
    def update(self, request, *args, **kwargs):
        serializer = OrganizationCreateSerializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            update_organization(organization_id=self.kwargs['pk'], **serializer.validated_data)
        except OrganizationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        organization = self.get_queryset().get(id=self.kwargs['pk'])
        return Response(OrganizationSerializer(organization).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_organization(organization_id=self.kwargs['pk'])
        except OrganizationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def teams(self, request, pk=None):
        """Teams of the organization."""
        organization = self.get_object()
        teams = organization.teams.select_related('organization', 'team_leader')
        return Response(TeamSerializer(teams, many=True).data)


class TeamViewSet(viewsets.ModelViewSet):
    """
    Teams and their members. Staff can read; only admins can write.

    members: GET list of active members
    add_member: POST {user_id}
    remove_member: POST {user_id}
    """

    serializer_class = TeamSerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnlyStaff]
    pagination_class = OrganizationPagination

    def get_queryset(self):
        queryset = Team.objects.select_related('organization', 'team_leader')
        organization = self.request.query_params.get('organization')
        if organization:
            queryset = queryset.filter(organization_id=organization)
        return queryset

    @extend_schema(request=TeamCreateSerializer, responses={201: TeamSerializer})
    def create(self, request, *args, **kwargs):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            team = create_team(created_by=request.user, **serializer.validated_data)
        except OrganizationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (InactiveOrganizationError, InvalidTeamMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=TeamUpdateSerializer, responses={200: TeamSerializer})
    def update(self, request, *args, **kwargs):
        serializer = TeamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            team = update_team(team_id=self.kwargs['pk'], **serializer.validated_data)
        except TeamNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidTeamMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TeamSerializer(team).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_team(team_id=self.kwargs['pk'])
        except TeamNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        try:
            members = get_team_members(team_id=pk)
        except TeamNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(UserPublicSerializer(members, many=True).data)

    @extend_schema(request=TeamMemberActionSerializer, responses={200: UserPublicSerializer})
    @action(detail=True, methods=['post'])
    def add_member(self, request, pk=None):
        serializer = TeamMemberActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = add_team_member(team_id=pk, user_id=serializer.validated_data['user_id'])
        except TeamNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (InvalidTeamMemberError, AlreadyTeamMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UserPublicSerializer(user).data)

    @extend_schema(request=TeamMemberActionSerializer, responses={204: None})
    @action(detail=True, methods=['post'])
    def remove_member(self, request, pk=None):
        serializer = TeamMemberActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_team_member(team_id=pk, user_id=serializer.validated_data['user_id'])
        except TeamNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotTeamMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)
