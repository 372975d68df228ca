from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'admin/withdrawals', views.AdminWithdrawalViewSet, basename='admin-withdrawal')

urlpatterns = [
    path('businesses/<int:business_id>/wallet/', views.WalletView.as_view(), name='business-wallet'),
    path(
        'businesses/<int:business_id>/wallet/transactions/',
        views.TransactionListView.as_view(),
        name='business-wallet-transactions',
    ),
    path(
        'businesses/<int:business_id>/wallet/withdrawals/',
        views.WithdrawalListView.as_view(),
        name='business-wallet-withdrawals',
    ),
    path('businesses/<int:business_id>/wallet/withdraw/', views.WithdrawView.as_view(), name='business-wallet-withdraw'),
    path('admin/wallets/', views.AdminWalletListView.as_view(), name='admin-wallets'),
    path('', include(router.urls)),
]
