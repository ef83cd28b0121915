class FilterableQuerysetMixin:
    """
    Mixin to provide common filtering functionality for querysets.
    Maps query parameters to case-insensitive "contains" lookups.
    """

    def get_queryset(self):
        """
        Returns filtered queryset based on query parameters.
        Override filter_fields in subclasses as {query_param: model_field}.
        """
        qs = super().get_queryset()

        for param, field in getattr(self, "filter_fields", {}).items():
            value = self.request.query_params.get(param)
            if value:
                qs = qs.filter(**{f"{field}__icontains": value.strip()})

        return qs
