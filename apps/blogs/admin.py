# apps/blogs/admin.py
from django.contrib import admin

from .models import Site, Blog, Comment


# Site Admin ---------------------------------------------------------------------------------------
@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ('name', 'domain', 'created_at')
    search_fields = ('name', 'domain')


# Blog Admin ---------------------------------------------------------------------------------------
@admin.register(Blog)
class BlogAdmin(admin.ModelAdmin):
    list_display = ('url', 'site', 'created_at')
    search_fields = ('url', 'site__domain')
    list_filter = ('site',)


# Comment Admin ------------------------------------------------------------------------------------
@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['name', 'comment_summary', 'blog', 'parent', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'body']
    date_hierarchy = 'created_at'

    def comment_summary(self, obj):
        return obj.body[:50] + "..." if len(obj.body) > 50 else obj.body
