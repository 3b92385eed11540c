from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Admin site
    path('admin/', admin.site.urls),

    # JSON API
    path('api/', include('apps.users.urls')),
    path('api/', include('apps.students.urls')),
    path('api/', include('apps.detention.urls')),
    path('api/', include('apps.communication.urls')),
    path('api/', include('apps.analytics.urls')),
]

# Admin site customization
admin.site.site_header = 'Behavior Monitor Administration'
admin.site.site_title = 'Behavior Monitor Admin'
admin.site.index_title = 'Detentions, warnings and staff'
