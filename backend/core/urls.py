from django.conf import settings
from django.contrib import admin
from django.urls import path, include
from django.conf.urls.static import static

from escalas.api.v1.urls import urlpatterns as api_urls

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/", include((api_urls, "api"))),
] + static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
