from django.contrib import admin
from django.urls import path, include
from rest_framework.authtoken import views as authtoken_views


urlpatterns = [
    path('api/', include('api.urls')),
    path('api/', include('payments.urls')),
    path('api/auth/token/', authtoken_views.obtain_auth_token, name='api-token'),
    path('admin/', admin.site.urls),  # Keep this last
]
