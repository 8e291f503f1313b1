from django import forms

from .models import MAX_RATING, MIN_RATING, Review

RATING_CHOICES = [(value, str(value)) for value in range(MIN_RATING, MAX_RATING + 1)]


class ReviewForm(forms.ModelForm):
    rating = forms.TypedChoiceField(
        choices=RATING_CHOICES,
        coerce=int,
        widget=forms.RadioSelect,
        error_messages={"required": "Please pick a rating."},
    )
    comment = forms.CharField(
        required=False,
        max_length=4000,
        widget=forms.Textarea(attrs={"rows": 4, "placeholder": "Share your thoughts about the movie..."}),
    )

    class Meta:
        model = Review
        fields = ("rating", "comment")

    def clean_comment(self):
        return (self.cleaned_data.get("comment") or "").strip()
