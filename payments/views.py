from django.shortcuts import get_object_or_404
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.business.models import Business
from payments import ledger
from payments.models import Wallet, WithdrawalRequest
from payments.serializers import (
    ReviewSerializer,
    TransactionSerializer,
    WalletSerializer,
    WithdrawalRequestSerializer,
    WithdrawSerializer,
)


class BusinessWalletMixin:
    permission_classes = [IsAuthenticated]

    def get_business(self):
        business = get_object_or_404(Business, pk=self.kwargs['business_id'])
        if not business.is_managed_by(self.request.user):
            raise PermissionDenied("You do not manage this business.")
        return business


class WalletView(BusinessWalletMixin, APIView):
    def get(self, request, business_id):
        wallet = ledger.get_wallet(self.get_business())
        return Response(WalletSerializer(wallet).data)


class TransactionListView(BusinessWalletMixin, generics.ListAPIView):
    serializer_class = TransactionSerializer

    def get_queryset(self):
        queryset = self.get_business().transactions.all()
        transaction_type = self.request.query_params.get('type')
        if transaction_type:
            queryset = queryset.filter(type=transaction_type)
        return queryset


class WithdrawalListView(BusinessWalletMixin, generics.ListAPIView):
    serializer_class = WithdrawalRequestSerializer

    def get_queryset(self):
        queryset = self.get_business().withdrawal_requests.all()
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset


class WithdrawView(BusinessWalletMixin, APIView):
    def post(self, request, business_id):
        business = self.get_business()
        serializer = WithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        withdrawal = ledger.request_withdrawal(business, actor=request.user, **serializer.validated_data)
        return Response(WithdrawalRequestSerializer(withdrawal).data, status=status.HTTP_201_CREATED)


class AdminWithdrawalViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Back-office review of withdrawal requests."""

    queryset = WithdrawalRequest.objects.select_related('business').all()
    serializer_class = WithdrawalRequestSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset

    def _review(self, request, operation):
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        withdrawal = operation(self.get_object(), request.user, notes=serializer.validated_data['notes'])
        return Response(self.get_serializer(withdrawal).data)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        return self._review(request, ledger.approve_withdrawal)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        return self._review(request, ledger.reject_withdrawal)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        return self._review(request, ledger.complete_withdrawal)


class AdminWalletListView(generics.ListAPIView):
    queryset = Wallet.objects.select_related('business').order_by('-available_balance')
    serializer_class = WalletSerializer
    permission_classes = [IsAdminUser]
