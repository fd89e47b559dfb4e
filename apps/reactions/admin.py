# apps/reactions/admin.py
from django.contrib import admin

from .models import Reaction


# Reaction Admin -----------------------------------------------------------------------------------
@admin.register(Reaction)
class ReactionAdmin(admin.ModelAdmin):
    list_display = ('visitor_id', 'type', 'blog', 'comment', 'created_at', 'updated_at')
    search_fields = ('visitor_id', 'type')
    list_filter = ('type', 'created_at')

    # rows are written by the reaction pipeline only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
