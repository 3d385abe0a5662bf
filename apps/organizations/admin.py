from django.contrib import admin
from django.utils.html import format_html

from .models import Organization, Team


class TeamInline(admin.TabularInline):
    model = Team
    extra = 0
    fields = ['name', 'team_leader', 'is_active']
    raw_id_fields = ['team_leader']


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'color_swatch', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'description']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    inlines = [TeamInline]

    def color_swatch(self, obj):
        return format_html(
            '<span style="display: inline-block; width: 14px; height: 14px; '
            'border-radius: 3px; background: {};"></span>',
            obj.color,
        )
    color_swatch.short_description = 'Color'


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'team_leader', 'is_active', 'created_at']
    list_filter = ['is_active', 'organization']
    search_fields = ['name', 'organization__name']
    raw_id_fields = ['team_leader', 'created_by']
    list_select_related = ['organization', 'team_leader']
