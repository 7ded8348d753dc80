# store/api/urls.py

from django.urls import path

from store.api.views import MyStoresView

urlpatterns = [
    path("mine/", MyStoresView.as_view(), name="store-mine"),
]
