from django.urls import path

from .views import ReviewCreateView

app_name = "reviews"

urlpatterns = [
    path("<uuid:movie_id>/new/", ReviewCreateView.as_view(), name="create"),
]
