from django.http import FileResponse, HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import User
from apps.accounts.permissions import IsAdmin, IsStaffMember
from apps.accounts.serializers import UserPublicSerializer
from apps.merchants.models import Merchant
from apps.merchants.services import (
    create_merchant_account,
    MerchantAccountExistsError,
    MerchantNotLinkedError,
)
from .serializers import (
    ContractListSerializer,
    ContractDetailSerializer,
    ContractCreateSerializer,
    ContractUpdateSerializer,
    ContractFilterSerializer,
    OnboardingDraftSerializer,
    StatusChangeSerializer,
    SignContractSerializer,
    CopyContractSerializer,
    BulkIdsSerializer,
    BulkStatusSerializer,
    BulkAssignSerializer,
    ContractCalculationSerializer,
    CalculatorPreviewSerializer,
    CalculationResultSerializer,
    ContractDocumentSerializer,
    DocumentUploadSerializer,
    KanbanColumnSerializer,
    KanbanBoardColumnSerializer,
)
from .services import (
    create_contract,
    get_visible_contracts,
    filter_contracts,
    save_onboarding_draft,
    submit_contract,
    change_status,
    sign_contract,
    get_client_ip,
    copy_contract,
    recalculate_contract,
    preview_calculation,
    bulk_update_status,
    bulk_assign as assign_contracts,
    bulk_delete as delete_contracts,
    export_contracts_csv,
    get_columns,
    build_kanban_board,
    visible_columns,
    upload_document,
    get_document,
    delete_document,
    # Exceptions
    ContractLockedError,
    IncompleteContractError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    MissingLostReasonError,
    InvalidSegmentError,
    ContractNumberError,
    DocumentNotFoundError,
    InvalidAssigneeError,
)


class ContractPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ContractViewSet(viewsets.ModelViewSet):
    """
    Contracts visible to the current back-office user.

    list: filter by status (repeatable), source, merchant, assigned_to,
        created_from, created_to, search
    draft: PUT wizard sections (autosave)
    submit / status / sign / copy / calculate: workflow actions
    documents: GET list, POST multipart upload
    bulk_status / bulk_assign / bulk_delete / export / kanban: list actions
    """

    permission_classes = [IsAuthenticated, IsStaffMember]
    pagination_class = ContractPagination
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = get_visible_contracts(self.request.user)
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related(
                'business_locations', 'authorized_persons', 'actual_owners',
                'items__addons', 'documents__uploaded_by',
            )
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return ContractListSerializer
        if self.action in ('update', 'partial_update'):
            return ContractUpdateSerializer
        return ContractDetailSerializer

    def get_permissions(self):
        if self.action in ('destroy', 'bulk_delete'):
            return [IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def _filtered(self, request):
        filters = ContractFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = dict(filters.validated_data)
        data['statuses'] = data.pop('status', None)
        return filter_contracts(self.get_queryset(), **data)

    def _detail(self, contract):
        contract = self.get_queryset().get(id=contract.id)
        return ContractDetailSerializer(contract, context={'request': self.request}).data

    def list(self, request, *args, **kwargs):
        queryset = self._filtered(request)
        page = self.paginate_queryset(queryset)
        serializer = ContractListSerializer(page, many=True, context={'request': request})
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=ContractCreateSerializer, responses={201: ContractDetailSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ContractCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        merchant = None
        if data.get('merchant_id'):
            merchant = get_object_or_404(Merchant, id=data['merchant_id'])
        assigned_to = None
        if data.get('assigned_to_id'):
            assigned_to = get_object_or_404(User, id=data['assigned_to_id'], is_active=True)

        try:
            contract = create_contract(
                created_by=request.user,
                source=data['source'],
                merchant=merchant,
                notes=data['notes'],
                assigned_to=assigned_to,
            )
        except ContractNumberError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(self._detail(contract), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        contract = self.get_object()
        if contract.is_locked:
            return Response(
                {'error': f'Contract {contract.contract_number} is {contract.status} and cannot be edited'},
                status=status.HTTP_400_BAD_REQUEST
            )
        serializer = ContractUpdateSerializer(contract, data=request.data, partial=kwargs.pop('partial', False))
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(self._detail(contract))

    @extend_schema(request=OnboardingDraftSerializer, responses={200: ContractDetailSerializer})
    @action(detail=True, methods=['put'])
    def draft(self, request, pk=None):
        """Autosave wizard sections. Identical payloads are not written again."""
        contract = self.get_object()
        serializer = OnboardingDraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract, saved = save_onboarding_draft(
                contract=contract,
                data=serializer.validated_data,
                user=request.user,
            )
        except ContractLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'saved': saved,
            'saved_at': timezone.now() if saved else None,
            'contract': self._detail(contract),
        })

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        contract = self.get_object()
        try:
            contract = submit_contract(contract=contract, user=request.user)
        except IncompleteContractError as e:
            return Response(
                {'error': str(e), 'missing': e.missing},
                status=status.HTTP_400_BAD_REQUEST
            )
        except ContractLockedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self._detail(contract))

    @extend_schema(request=StatusChangeSerializer, responses={200: ContractDetailSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        contract = self.get_object()
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract = change_status(
                contract=contract,
                new_status=serializer.validated_data['status'],
                user=request.user,
                lost_reason=serializer.validated_data['lost_reason'],
                lost_notes=serializer.validated_data['lost_notes'],
            )
        except (InvalidStatusError, MissingLostReasonError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self._detail(contract))

    @extend_schema(request=SignContractSerializer, responses={200: ContractDetailSerializer})
    @action(detail=True, methods=['post'])
    def sign(self, request, pk=None):
        contract = self.get_object()
        serializer = SignContractSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contract = sign_contract(
                contract=contract,
                signer_name=serializer.validated_data['signer_name'],
                ip_address=get_client_ip(request),
                user=request.user,
            )
        except InvalidStatusTransitionError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self._detail(contract))

    @extend_schema(request=CopyContractSerializer, responses={201: ContractDetailSerializer})
    @action(detail=True, methods=['post'])
    def copy(self, request, pk=None):
        contract = self.get_object()
        serializer = CopyContractSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            new_contract = copy_contract(
                source=contract,
                segments=serializer.validated_data['segments'],
                user=request.user,
            )
        except InvalidSegmentError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self._detail(new_contract), status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: ContractCalculationSerializer})
    @action(detail=True, methods=['post'])
    def calculate(self, request, pk=None):
        contract = self.get_object()
        calculation = recalculate_contract(contract=contract)
        return Response(ContractCalculationSerializer(calculation).data)

    @extend_schema(request=None, responses={201: UserPublicSerializer})
    @action(detail=True, methods=['post'], url_path='merchant-account')
    def merchant_account(self, request, pk=None):
        """Create the merchant's portal login and mail the temporary password."""
        contract = self.get_object()
        try:
            user, _ = create_merchant_account(contract=contract)
        except MerchantNotLinkedError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except MerchantAccountExistsError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(UserPublicSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DocumentUploadSerializer, responses={200: ContractDocumentSerializer(many=True)})
    @action(
        detail=True,
        methods=['get', 'post'],
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def documents(self, request, pk=None):
        contract = self.get_object()

        if request.method == 'POST':
            serializer = DocumentUploadSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            document = upload_document(
                contract=contract,
                file=serializer.validated_data['file'],
                user=request.user,
                document_name=serializer.validated_data.get('document_name', ''),
                document_type=serializer.validated_data['document_type'],
            )
            return Response(
                ContractDocumentSerializer(document, context={'request': request}).data,
                status=status.HTTP_201_CREATED
            )

        documents = contract.documents.select_related('uploaded_by')
        return Response(ContractDocumentSerializer(documents, many=True, context={'request': request}).data)

    @action(detail=True, methods=['get', 'delete'], url_path=r'documents/(?P<document_id>[^/.]+)')
    def document(self, request, pk=None, document_id=None):
        """GET downloads the file, DELETE removes it."""
        contract = self.get_object()
        try:
            if request.method == 'DELETE':
                delete_document(contract=contract, document_id=document_id)
                return Response(status=status.HTTP_204_NO_CONTENT)
            document = get_document(contract=contract, document_id=document_id)
        except DocumentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return FileResponse(
            document.file.open('rb'),
            as_attachment=True,
            filename=document.file.name.rsplit('/', 1)[-1],
        )

    # -------------------------------------------------------------------------
    # List-level actions
    # -------------------------------------------------------------------------

    @extend_schema(request=BulkStatusSerializer, responses={200: None})
    @action(detail=False, methods=['post'])
    def bulk_status(self, request):
        serializer = BulkStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            count = bulk_update_status(
                contracts=self.get_queryset().filter(id__in=data['ids']),
                status=data['status'],
                user=request.user,
                lost_reason=data['lost_reason'],
                lost_notes=data['lost_notes'],
            )
        except (InvalidStatusError, MissingLostReasonError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'updated': count})

    @extend_schema(request=BulkAssignSerializer, responses={200: None})
    @action(detail=False, methods=['post'])
    def bulk_assign(self, request):
        serializer = BulkAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            count = assign_contracts(
                contracts=self.get_queryset().filter(id__in=serializer.validated_data['ids']),
                assignee_id=serializer.validated_data['assigned_to'],
            )
        except InvalidAssigneeError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'updated': count})

    @extend_schema(request=BulkIdsSerializer, responses={200: None})
    @action(detail=False, methods=['post'])
    def bulk_delete(self, request):
        serializer = BulkIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        count = delete_contracts(contracts=self.get_queryset().filter(id__in=serializer.validated_data['ids']))
        return Response({'deleted': count})

    @extend_schema(responses={(200, 'text/csv'): bytes})
    @action(detail=False, methods=['get'])
    def export(self, request):
        """CSV of the filtered contract list."""
        content = export_contracts_csv(self._filtered(request))
        response = HttpResponse(content, content_type='text/csv; charset=utf-8')
        filename = f"contracts-{timezone.now().date().isoformat()}.csv"
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response

    @extend_schema(responses={200: KanbanBoardColumnSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def kanban(self, request):
        board = build_kanban_board(
            contracts=self._filtered(request),
            columns=get_columns(request.user),
        )
        return Response(KanbanBoardColumnSerializer(board, many=True, context={'request': request}).data)


class KanbanColumnViewSet(viewsets.ModelViewSet):
    """
    Board column configuration.

    Users manage their own columns. Admins may also create shared columns
    (`shared: true`) used by everyone without columns of their own.
    """

    serializer_class = KanbanColumnSerializer
    permission_classes = [IsAuthenticated, IsStaffMember]

    def get_queryset(self):
        return visible_columns(self.request.user)

    def _owner(self, serializer):
        shared = serializer.validated_data.pop('shared', False)
        if shared and self.request.user.is_admin:
            return None
        return self.request.user

    def perform_create(self, serializer):
        serializer.save(user=self._owner(serializer))

    def perform_update(self, serializer):
        if 'shared' in serializer.validated_data:
            serializer.save(user=self._owner(serializer))
        else:
            serializer.save()


@extend_schema(request=CalculatorPreviewSerializer, responses={200: CalculationResultSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def calculator_preview(request):
    """Calculate fees and margins for unsaved wizard data."""
    serializer = CalculatorPreviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = preview_calculation(**serializer.validated_data)
    return Response(CalculationResultSerializer(result).data)
