"""Tests for the keyword moderation filter."""

from app.services.moderation import ModerationFilter, get_moderation_filter


class TestMasking:
    """Tests for banned-word masking."""

    def test_masks_banned_word(self):
        """A banned word is replaced with asterisks of equal length."""
        result = ModerationFilter(["욕설1"]).moderate("안녕하세요 욕설1")
        assert result.moderated_text == "안녕하세요 ***"
        assert result.is_approved is False

    def test_masks_every_occurrence(self):
        """All occurrences are masked, not only the first."""
        result = ModerationFilter(["bad"]).moderate("bad word, bad day, bad")
        assert result.moderated_text == "*** word, *** day, ***"
        assert result.is_approved is False

    def test_case_insensitive(self):
        """Matching ignores case and the mask keeps the matched length."""
        result = ModerationFilter(["darn"]).moderate("DARN it, Darn it")
        assert result.moderated_text == "**** it, **** it"
        assert result.is_approved is False

    def test_clean_text_unchanged(self):
        """Text without banned words passes unchanged and approved."""
        result = ModerationFilter(["욕설1", "욕설2"]).moderate("좋은 하루 되세요")
        assert result.moderated_text == "좋은 하루 되세요"
        assert result.is_approved is True

    def test_multiple_banned_words(self):
        """Every term in the list is applied."""
        result = ModerationFilter(["foo", "bar"]).moderate("foo and bar")
        assert result.moderated_text == "*** and ***"

    def test_regex_characters_are_literal(self):
        """Banned words are matched literally, not as patterns."""
        result = ModerationFilter(["a.b"]).moderate("axb a.b")
        assert result.moderated_text == "axb ***"

    def test_empty_word_list(self):
        """An empty list approves everything."""
        result = ModerationFilter([]).moderate("anything goes")
        assert result.is_approved is True
        assert result.moderated_text == "anything goes"

    def test_empty_text(self):
        """Empty transcripts are approved and stay empty."""
        result = ModerationFilter(["bad"]).moderate("")
        assert result.moderated_text == ""
        assert result.is_approved is True

    def test_default_list_from_settings(self):
        """The configured filter falls back to the built-in sample list."""
        result = get_moderation_filter().moderate("부적절한단어 입니다")
        assert result.moderated_text == "****** 입니다"
        assert result.is_approved is False


class TestTruncation:
    """Tests for length truncation."""

    def test_exact_limit_not_truncated(self):
        """Text of exactly the maximum length gets no ellipsis."""
        text = "a" * 500
        result = ModerationFilter([]).moderate(text)
        assert result.moderated_text == text

    def test_over_limit_truncated(self):
        """Longer text is cut at the limit with an ellipsis appended."""
        result = ModerationFilter([]).moderate("a" * 501)
        assert result.moderated_text == "a" * 500 + "..."
        assert len(result.moderated_text) == 503

    def test_never_longer_than_limit_plus_ellipsis(self):
        """Output length is bounded by max_length + 3."""
        for length in (0, 1, 499, 500, 501, 2000):
            result = ModerationFilter(["a"]).moderate("a" * length)
            assert len(result.moderated_text) <= 503
            assert result.moderated_text.endswith("...") == (length > 500)

    def test_mask_past_cutoff_is_dropped(self):
        """A banned word beyond the cut-off disappears with the tail but still rejects."""
        result = ModerationFilter(["bad"]).moderate("x" * 500 + "bad")
        assert result.moderated_text == "x" * 500 + "..."
        assert result.is_approved is False

    def test_custom_max_length(self):
        """The limit is configurable."""
        result = ModerationFilter([], max_length=5).moderate("hello world")
        assert result.moderated_text == "hello..."
