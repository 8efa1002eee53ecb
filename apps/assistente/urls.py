# apps/assistente/urls.py

from django.urls import path
from . import views

app_name = 'assistente'

urlpatterns = [
    path('', views.assistente_view, name='chat'),
]
