import django_filters
from django.contrib.auth import get_user_model


class UserFilter(django_filters.FilterSet):
    username = django_filters.CharFilter(field_name="username", lookup_expr="icontains")
    email = django_filters.CharFilter(field_name="email", lookup_expr="icontains")
    nif = django_filters.CharFilter(field_name="profile__nif", lookup_expr="icontains")
    role = django_filters.CharFilter(
        field_name="roles__name", lookup_expr="exact", distinct=True
    )

    class Meta:
        model = get_user_model()
        fields = ["username", "email", "nif", "role"]
