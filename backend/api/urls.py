from django.urls import path
from .views import LevelPointsAPIView, PlayersPointsAPIView, SimulateAPIView, UploadTimesAPIView

urlpatterns = [
    path("points/", LevelPointsAPIView.as_view(), name="api-points"),
    path("players/points/", PlayersPointsAPIView.as_view(), name="api-players-points"),
    path("upload/", UploadTimesAPIView.as_view(), name="api-upload"),
    path("simulate/", SimulateAPIView.as_view(), name="api-simulate"),
]
