from __future__ import annotations

from typing import Any

from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from django.utils.text import slugify

from apps.accounts.models import Profile

User = get_user_model()


def _normalise_name(value: str | None) -> str:
    return " ".join((value or "").split()).strip()


class SignupForm(forms.Form):
    full_name = forms.CharField(label="Full name", max_length=150)
    email = forms.EmailField(label="Email address")
    password1 = forms.CharField(label="Password", widget=forms.PasswordInput)
    password2 = forms.CharField(label="Confirm password", widget=forms.PasswordInput)

    def clean_full_name(self) -> str:
        full_name = _normalise_name(self.cleaned_data.get("full_name"))
        if not full_name:
            raise forms.ValidationError("Please enter your name.")
        return full_name

    def clean_email(self) -> str:
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account already exists with this email address.")
        return email

    def clean(self) -> dict[str, Any]:
        cleaned = super().clean()
        password1 = cleaned.get("password1")
        password2 = cleaned.get("password2")
        if password1 and password2 and password1 != password2:
            self.add_error("password2", "The two passwords do not match.")
        if password1:
            try:
                validate_password(password1)
            except forms.ValidationError as exc:
                self.add_error("password1", exc)
        return cleaned

    def _generate_username(self, email: str) -> str:
        base = slugify(email.split("@", 1)[0]) or slugify(self.cleaned_data.get("full_name") or "") or "user"
        base = base[:20]
        candidate = base
        suffix = 1
        while User.objects.filter(username=candidate).exists():
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate

    def save(self) -> User:
        email = self.cleaned_data["email"]
        full_name = self.cleaned_data["full_name"]
        first_name, _, last_name = full_name.partition(" ")

        with transaction.atomic():
            user = User.objects.create_user(
                username=self._generate_username(email),
                email=email,
                password=self.cleaned_data["password1"],
                first_name=first_name[:150],
                last_name=last_name[:150],
            )
            # the post_save signal already created the profile
            Profile.objects.update_or_create(user=user, defaults={"full_name": full_name})
        return user


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ("full_name", "avatar_url")
        labels = {"full_name": "Full name", "avatar_url": "Avatar URL"}

    def clean_full_name(self) -> str:
        full_name = _normalise_name(self.cleaned_data.get("full_name"))
        if not full_name:
            raise forms.ValidationError("Please enter your name.")
        return full_name
