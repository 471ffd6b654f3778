from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import User, Education, Experience, PortfolioLink, Staff


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    # show extra fields in admin
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("CareerConnect", {"fields": ("name", "age", "role", "location", "skills", "total_experience")}),
    )
    list_display = ("email", "name", "role", "is_active", "last_login")
    search_fields = ("email", "name")


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "departments", "is_active")


admin.site.register(Education)
admin.site.register(Experience)
admin.site.register(PortfolioLink)
