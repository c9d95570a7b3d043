from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/', include('system.urls')),  # settings, diagnostics, repair
    path('api/', include('people.urls')),
    path('api/access/', include('access.urls')),
    path('api/users/', include('users.urls')),
]
