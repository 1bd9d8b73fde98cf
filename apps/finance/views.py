from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember
from apps.periods.services import PeriodsServiceError

from .serializers import (
    PaymentSerializer,
    PaymentCreateSerializer,
    PaymentStatusSerializer,
    PaymentFilterSerializer,
    ExpenseSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseFilterSerializer,
    TransactionSerializer,
    TransactionCreateSerializer,
    TransactionUpdateSerializer,
    TransactionFilterSerializer,
    TransactionPageSerializer,
    TransactionHistorySerializer,
    UserBalanceSerializer,
    BalanceQuerySerializer,
    GroupBalanceSummarySerializer,
)
from .services import (
    create_payment,
    list_payments,
    update_payment_status,
    delete_payment,
    create_expense,
    update_expense,
    delete_expense,
    list_expenses,
    create_transaction,
    update_transaction,
    delete_transaction,
    list_transactions,
    list_transaction_history,
    get_user_balance,
    group_balance_summary,
    # Exceptions
    FinanceServiceError,
    FinancePermissionError,
    PaymentNotFoundError,
    ExpenseNotFoundError,
    TransactionNotFoundError,
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, FinancePermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, (PaymentNotFoundError, ExpenseNotFoundError, TransactionNotFoundError)):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


# =============================================================================
# Payments
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('user_id', OpenApiTypes.UUID),
        OpenApiParameter('period_id', OpenApiTypes.UUID),
        OpenApiParameter('status', OpenApiTypes.STR),
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
    ],
    responses={200: PaymentSerializer(many=True)},
    tags=['finance'],
)
@extend_schema(
    methods=['POST'],
    request=PaymentCreateSerializer,
    responses={201: PaymentSerializer},
    description="Record a payment (own, or anyone's for admins and accountants).",
    tags=['finance'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def payment_list(request, group_id):
    if request.method == 'GET':
        filters = PaymentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        payments = list_payments(group_id=group_id, **filters.validated_data)
        return Response(PaymentSerializer(payments, many=True).data)

    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        payment = create_payment(group_id=group_id, user=request.user, **serializer.validated_data)
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=PaymentStatusSerializer,
    responses={200: PaymentSerializer},
    description="Change a payment's status (admins and accountants).",
    tags=['finance'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, tags=['finance'])
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def payment_detail(request, group_id, payment_id):
    try:
        if request.method == 'DELETE':
            delete_payment(group_id=group_id, payment_id=payment_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = update_payment_status(
            group_id=group_id,
            payment_id=payment_id,
            user=request.user,
            status=serializer.validated_data['status'],
        )
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(PaymentSerializer(payment).data)


# =============================================================================
# Expenses
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('period_id', OpenApiTypes.UUID),
        OpenApiParameter('user_id', OpenApiTypes.UUID),
        OpenApiParameter('type', OpenApiTypes.STR),
        OpenApiParameter('start_date', OpenApiTypes.DATE),
        OpenApiParameter('end_date', OpenApiTypes.DATE),
    ],
    responses={200: ExpenseSerializer(many=True)},
    tags=['finance'],
)
@extend_schema(
    methods=['POST'],
    request=ExpenseCreateSerializer,
    responses={201: ExpenseSerializer},
    description="Add a shared expense to the active period.",
    tags=['finance'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def expense_list(request, group_id):
    if request.method == 'GET':
        filters = ExpenseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data
        expenses = list_expenses(
            group_id=group_id,
            period_id=data.get('period_id'),
            user_id=data.get('user_id'),
            expense_type=data.get('type'),
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
        )
        return Response(ExpenseSerializer(expenses, many=True).data)

    serializer = ExpenseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        expense = create_expense(
            group_id=group_id,
            user=request.user,
            description=data['description'],
            amount=data['amount'],
            date=data['date'],
            expense_type=data['type'],
            receipt_url=data['receipt_url'],
        )
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=ExpenseUpdateSerializer,
    responses={200: ExpenseSerializer},
    tags=['finance'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, tags=['finance'])
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def expense_detail(request, group_id, expense_id):
    try:
        if request.method == 'DELETE':
            delete_expense(group_id=group_id, expense_id=expense_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = ExpenseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = update_expense(
            group_id=group_id,
            expense_id=expense_id,
            user=request.user,
            **serializer.validated_data,
        )
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(ExpenseSerializer(expense).data)


# =============================================================================
# Transactions
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('target_user_id', OpenApiTypes.UUID),
        OpenApiParameter('period_id', OpenApiTypes.UUID),
        OpenApiParameter('cursor', OpenApiTypes.UUID),
        OpenApiParameter('limit', OpenApiTypes.INT),
    ],
    responses={200: TransactionPageSerializer},
    description="Page through the ledger, newest first.",
    tags=['finance'],
)
@extend_schema(
    methods=['POST'],
    request=TransactionCreateSerializer,
    responses={201: TransactionSerializer},
    tags=['finance'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
def transaction_list(request, group_id):
    if request.method == 'GET':
        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        try:
            page = list_transactions(group_id=group_id, **filters.validated_data)
        except FinanceServiceError as e:
            return _service_error_response(e)
        return Response(TransactionPageSerializer(page).data)

    serializer = TransactionCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        entry = create_transaction(
            group_id=group_id,
            user=request.user,
            target_user_id=data['target_user_id'],
            amount=data['amount'],
            transaction_type=data['type'],
            description=data['description'],
        )
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(TransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=TransactionUpdateSerializer,
    responses={200: TransactionSerializer},
    description="Change a ledger entry (admins and accountants).",
    tags=['finance'],
)
@extend_schema(methods=['DELETE'], responses={204: None}, description="Admins only.", tags=['finance'])
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGroupMember])
def transaction_detail(request, group_id, transaction_id):
    try:
        if request.method == 'DELETE':
            delete_transaction(group_id=group_id, transaction_id=transaction_id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = TransactionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        entry = update_transaction(
            group_id=group_id,
            transaction_id=transaction_id,
            user=request.user,
            amount=data.get('amount'),
            description=data.get('description'),
            transaction_type=data.get('type'),
        )
    except (FinanceServiceError, PeriodsServiceError) as e:
        return _service_error_response(e)

    return Response(TransactionSerializer(entry).data)


@extend_schema(
    responses={200: TransactionHistorySerializer(many=True)},
    description="Audit trail of one ledger entry, including deleted ones.",
    tags=['finance'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def transaction_history(request, group_id, transaction_id):
    try:
        history = list_transaction_history(
            group_id=group_id,
            user=request.user,
            transaction_id=transaction_id,
        )
    except FinanceServiceError as e:
        return _service_error_response(e)

    return Response(TransactionHistorySerializer(history, many=True).data)


# =============================================================================
# Balances
# =============================================================================

@extend_schema(
    parameters=[OpenApiParameter('user_id', OpenApiTypes.UUID, description="Defaults to yourself")],
    responses={200: UserBalanceSerializer},
    tags=['finance'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def balance_detail(request, group_id):
    query = BalanceQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    try:
        balance = get_user_balance(
            group_id=group_id,
            user=request.user,
            target_user_id=query.validated_data.get('user_id'),
        )
    except FinanceServiceError as e:
        return _service_error_response(e)

    return Response(UserBalanceSerializer(balance).data)


@extend_schema(
    parameters=[OpenApiParameter('user_id', OpenApiTypes.UUID, description="Defaults to yourself")],
    responses={200: TransactionHistorySerializer(many=True)},
    description="Last 50 ledger changes to a member's balance.",
    tags=['finance'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def balance_history(request, group_id):
    query = BalanceQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    try:
        history = list_transaction_history(
            group_id=group_id,
            user=request.user,
            target_user_id=query.validated_data.get('user_id'),
        )
    except FinanceServiceError as e:
        return _service_error_response(e)

    return Response(TransactionHistorySerializer(history, many=True).data)


@extend_schema(
    responses={200: GroupBalanceSummarySerializer},
    description="Balances of all members (admins and accountants).",
    tags=['finance'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def balance_summary(request, group_id):
    try:
        summary = group_balance_summary(group_id=group_id, user=request.user)
    except FinanceServiceError as e:
        return _service_error_response(e)

    return Response(GroupBalanceSummarySerializer(summary).data)
