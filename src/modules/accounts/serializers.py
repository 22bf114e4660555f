from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers


class UserSerializer(serializers.ModelSerializer):
    roles = serializers.SlugRelatedField(many=True, read_only=True, slug_field="name")

    class Meta:
        model = get_user_model()
        fields = ["id", "username", "email", "roles"]
        read_only_fields = fields


class AdminUserSerializer(UserSerializer):
    """User row for the administrative listing, with profile data and order count.

    Users created before profiles existed render blank ``name`` and ``nif``.
    """

    name = serializers.SerializerMethodField()
    nif = serializers.SerializerMethodField()
    order_count = serializers.IntegerField(read_only=True, default=0)

    class Meta(UserSerializer.Meta):
        fields = ["id", "username", "email", "name", "nif", "order_count", "roles"]
        read_only_fields = fields

    def _profile(self, user):
        return getattr(user, "profile", None)

    def get_name(self, user) -> str:
        profile = self._profile(user)
        return profile.full_name if profile else ""

    def get_nif(self, user) -> str:
        profile = self._profile(user)
        return profile.nif if profile else ""


class ReplaceRolesSerializer(serializers.Serializer):
    roles = serializers.ListField(
        child=serializers.CharField(max_length=50), allow_empty=True
    )
