from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import IsAdmin, IsStaffMember, IsMerchantUser
from apps.contracts.models import BusinessLocation
from apps.contracts.serializers import ContractListSerializer, BusinessLocationSerializer
from apps.contracts.services import get_visible_contracts
from .models import Merchant
from .serializers import (
    MerchantSerializer,
    MerchantOverviewSerializer,
    SimilarMerchantQuerySerializer,
    SimilarMerchantSerializer,
)
from .services import (
    create_merchant,
    update_merchant,
    delete_merchant,
    find_similar_merchants,
    get_merchant_overview,
    # Exceptions
    MerchantNotFoundError,
    DuplicateMerchantError,
)


class MerchantPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class MerchantViewSet(viewsets.ModelViewSet):
    """
    Merchant records for back-office staff.

    list: search by company name, ICO or contact email
    overview: contract and revenue summary
    contracts: contracts of the merchant visible to the user
    similar: GET ?company_name=&ico= possible duplicates
    """

    queryset = Merchant.objects.select_related('user')
    serializer_class = MerchantSerializer
    permission_classes = [IsAuthenticated, IsStaffMember]
    pagination_class = MerchantPagination

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        search = self.request.query_params.get('search')
        if self.action == 'list' and search:
            queryset = queryset.filter(
                Q(company_name__icontains=search) |
                Q(ico__icontains=search) |
                Q(contact_person_email__icontains=search)
            )
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = MerchantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            merchant = create_merchant(created_by=request.user, **serializer.validated_data)
        except DuplicateMerchantError as e:
            return Response(
                {'error': str(e), 'existing_id': str(e.existing.id) if e.existing else None},
                status=status.HTTP_409_CONFLICT
            )

        return Response(MerchantSerializer(merchant).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        merchant = self.get_object()
        serializer = MerchantSerializer(merchant, data=request.data, partial=kwargs.pop('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            merchant = update_merchant(merchant_id=merchant.id, **serializer.validated_data)
        except DuplicateMerchantError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(MerchantSerializer(merchant).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_merchant(merchant_id=kwargs['pk'])
        except MerchantNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: MerchantOverviewSerializer})
    @action(detail=True, methods=['get'])
    def overview(self, request, pk=None):
        try:
            overview = get_merchant_overview(merchant_id=pk)
        except MerchantNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(MerchantOverviewSerializer(overview).data)

    @extend_schema(responses={200: ContractListSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def contracts(self, request, pk=None):
        merchant = self.get_object()
        contracts = get_visible_contracts(request.user).filter(merchant=merchant)
        return Response(ContractListSerializer(contracts, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter('company_name', str),
            OpenApiParameter('ico', str),
            OpenApiParameter('threshold', int),
        ],
        responses={200: SimilarMerchantSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def similar(self, request):
        query = SimilarMerchantQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        matches = find_similar_merchants(**query.validated_data)
        data = [
            {'merchant': merchant, 'score': score, 'match_type': match_type}
            for merchant, score, match_type in matches
        ]
        return Response(SimilarMerchantSerializer(data, many=True).data)


# =============================================================================
# Merchant portal
# =============================================================================

def _portal_merchant(user):
    return Merchant.objects.filter(user=user).first()


@extend_schema(responses={200: MerchantSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMerchantUser])
def my_merchant(request):
    """Company profile of the signed-in merchant."""
    merchant = _portal_merchant(request.user)
    if merchant is None:
        return Response({'error': 'No merchant linked to this account'}, status=status.HTTP_404_NOT_FOUND)
    return Response(MerchantSerializer(merchant).data)


@extend_schema(responses={200: ContractListSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMerchantUser])
def my_contracts(request):
    contracts = get_visible_contracts(request.user)
    return Response(ContractListSerializer(contracts, many=True).data)


@extend_schema(responses={200: BusinessLocationSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMerchantUser])
def my_locations(request):
    locations = BusinessLocation.objects.filter(contract__merchant__user=request.user)
    return Response(BusinessLocationSerializer(locations, many=True).data)
