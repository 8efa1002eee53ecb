# apps/core/forms.py

from django import forms

from .models import Task


class TaskForm(forms.Form):
    """Validação do corpo de criação de tarefa (JSON ou form-encoded)"""

    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    priority = forms.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if not title:
            raise forms.ValidationError('Title cannot be empty.')
        return title

    def clean_priority(self):
        return self.cleaned_data.get('priority') or 'medium'
