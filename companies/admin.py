from django.contrib import admin

from .models import Company, CompanyBookmark, CompanyFollow, CompanyView, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "industry", "location", "size", "owner", "is_active", "created_at")
    list_filter = ("is_active", "size", "industry")
    search_fields = ("name", "email", "industry", "location")
    raw_id_fields = ("owner",)
    inlines = [TeamMemberInline]


@admin.register(CompanyView)
class CompanyViewAdmin(admin.ModelAdmin):
    list_display = ("company", "source", "ip_address", "viewed_at")
    list_filter = ("source",)


admin.site.register(CompanyFollow)
admin.site.register(CompanyBookmark)
