import logging

from django.contrib import messages
from django.contrib.auth import login
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db import IntegrityError
from django.shortcuts import redirect
from django.urls import reverse_lazy
from django.views.generic import FormView, UpdateView

from .forms import ProfileForm, SignupForm
from .models import Profile
from .utils import resolve_safe_next_url

log = logging.getLogger("accounts.views")


class SignupView(FormView):
    template_name = "registration/signup.html"
    form_class = SignupForm
    success_url = reverse_lazy("catalog:list")

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            return redirect("accounts:profile")
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        ctx["next"] = resolve_safe_next_url(self.request)
        return ctx

    def form_valid(self, form):
        try:
            user = form.save()
        except IntegrityError:
            form.add_error("email", "An account already exists with this email address.")
            return self.form_invalid(form)
        login(self.request, user, backend="django.contrib.auth.backends.ModelBackend")
        log.info("account_created user=%s", user.pk)
        messages.success(self.request, f"Welcome, {form.cleaned_data['full_name']}!")
        return redirect(self.get_success_url())

    def get_success_url(self):
        return resolve_safe_next_url(self.request) or super().get_success_url()


class ProfileView(LoginRequiredMixin, UpdateView):
    template_name = "accounts/profile.html"
    form_class = ProfileForm
    success_url = reverse_lazy("accounts:profile")

    def get_object(self, queryset=None):
        profile, _ = Profile.objects.get_or_create(user=self.request.user)
        return profile

    def form_valid(self, form):
        messages.success(self.request, "Your profile was updated.")
        return super().form_valid(form)
