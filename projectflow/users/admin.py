from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from projectflow.users.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ["id", "username", "email", "first_name", "last_name", "is_staff"]
    search_fields = ["username", "email", "first_name", "last_name"]
