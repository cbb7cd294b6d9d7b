from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework import serializers

from .permissions import ROLE_DEVELOPER
from .permissions import ROLES

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "display_name",
            "roles",
        )
        read_only_fields = fields

    def get_roles(self, obj) -> list[str]:
        return list(obj.groups.order_by("name").values_list("name", flat=True))


class UserCreateSerializer(serializers.ModelSerializer):
    """Admin-only account creation with a single initial role."""

    password = serializers.CharField(
        write_only=True, min_length=6, max_length=100, trim_whitespace=False
    )
    role = serializers.ChoiceField(choices=ROLES, default=ROLE_DEVELOPER)

    class Meta:
        model = User
        fields = ("username", "email", "first_name", "last_name", "password", "role")
        extra_kwargs = {
            "email": {"required": True},
            "first_name": {"required": True, "allow_blank": False, "max_length": 100},
            "last_name": {"required": True, "allow_blank": False, "max_length": 100},
        }

    def _letters_only(self, value: str) -> str:
        if not value.replace(" ", "").isalpha():
            msg = "Only letters and spaces are allowed."
            raise serializers.ValidationError(msg)
        return value

    def validate_first_name(self, value: str) -> str:
        return self._letters_only(value)

    def validate_last_name(self, value: str) -> str:
        return self._letters_only(value)

    def create(self, validated_data):
        role = validated_data.pop("role")
        user = User.objects.create_user(**validated_data)
        group, _created = Group.objects.get_or_create(name=role)
        user.groups.add(group)
        return user
