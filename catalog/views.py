"""Read-only viewsets for the card catalog."""

from common.ids import parse_product_id
from django.http import Http404
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets

from . import selectors
from .models import Product
from .serializers import ProductDetailSerializer, ProductListSerializer


class ProductFilterSet(filters.FilterSet):
    sport = filters.ChoiceFilter(field_name="sport", choices=Product.SPORT_CHOICES)
    great_deal = filters.BooleanFilter(field_name="great_deal")
    autograph = filters.BooleanFilter(field_name="autograph")
    in_stock = filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = Product
        fields = ["sport", "great_deal", "autograph", "in_stock"]

    def filter_in_stock(self, queryset, name, value):
        return queryset.filter(stock__gt=0) if value else queryset.filter(stock=0)


@extend_schema_view(
    list=extend_schema(
        summary="List cards",
        description=(
            "Returns active cards. Supports filtering by `sport`, `great_deal`, `autograph` and `in_stock`, "
            "ordering by `price_cents`, `title` or `created_at`, and search via either `search` or `q`."
        ),
        tags=["Catalog Endpoints"],
        parameters=[
            OpenApiParameter("sport", OpenApiTypes.STR, location="query", description="basketball, soccer or nfl"),
            OpenApiParameter("in_stock", OpenApiTypes.BOOL, location="query", description="Only cards with stock"),
            OpenApiParameter(
                "ordering", OpenApiTypes.STR, location="query", description="Order by `price_cents`, `title`"
            ),
            OpenApiParameter("q", OpenApiTypes.STR, location="query", description="Search by title or player"),
        ],
        examples=[
            OpenApiExample(
                "Card list",
                value={
                    "count": 1,
                    "next": None,
                    "previous": None,
                    "results": [
                        {
                            "id": "101",
                            "sport": "basketball",
                            "title": "1996 Topps Chrome Rookie",
                            "player": "Kobe Bryant",
                            "price_cents": 2000,
                            "image": "/cards/101.jpg",
                            "great_deal": False,
                            "autograph": True,
                            "in_stock": True,
                        }
                    ],
                },
                response_only=True,
            )
        ],
    ),
    retrieve=extend_schema(
        summary="Get card",
        description="Returns a single active card. Accepts any id spelling (e.g. `Card-011` resolves to `11`).",
        tags=["Catalog Endpoints"],
    ),
)
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    lookup_field = "id"
    lookup_value_regex = "[^/]+"
    filterset_class = ProductFilterSet
    throttle_scope = "catalog"

    # Support both `search` and `q` query params for search
    class QSearchFilter(drf_filters.SearchFilter):
        search_param = "q"

    filter_backends = [
        filters.DjangoFilterBackend,
        drf_filters.OrderingFilter,
        drf_filters.SearchFilter,
        QSearchFilter,
    ]
    ordering_fields = ["price_cents", "title", "created_at"]
    search_fields = ["title", "player"]

    def get_queryset(self):
        return selectors.list_products()

    def get_object(self):
        try:
            pid = parse_product_id(self.kwargs["id"])
        except ValueError:
            raise Http404("Not found.")
        try:
            return self.get_queryset().get(id=pid)
        except Product.DoesNotExist:
            raise Http404("Not found.")

    def get_serializer_class(self):
        return ProductDetailSerializer if self.action == "retrieve" else ProductListSerializer
