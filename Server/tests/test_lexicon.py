import json

from shiritori.config.game_settings import score_word
from shiritori.services.lexicon_service import LexiconValidator


def test_first_word_only_needs_length():
    validator = LexiconValidator()
    assert validator.validate("train", []) == (True, "")


def test_too_short_is_checked_after_trimming():
    validator = LexiconValidator()
    assert validator.validate("  cat  ", []) == (False, "too short")
    assert validator.validate("cat", [], min_length=3) == (True, "")


def test_wrong_starting_letter_is_case_insensitive():
    validator = LexiconValidator()
    assert validator.validate("Nest", ["traiN"]) == (True, "")
    assert validator.validate("pest", ["train"]) == (False, "wrong starting letter")


def test_repeat_is_rejected_case_insensitively():
    validator = LexiconValidator()
    assert validator.validate("NOON", ["noon"]) == (False, "word already used")


def test_length_rule_wins_over_chaining_rule():
    validator = LexiconValidator()
    assert validator.validate("pot", ["train"]) == (False, "too short")


def test_chaining_rule_wins_over_repeat_rule():
    validator = LexiconValidator()
    history = ["train", "nest", "tent"]
    assert validator.validate("nest", history) == (False, "wrong starting letter")


def test_non_string_candidate_is_rejected():
    validator = LexiconValidator()
    assert validator.validate(None, []) == (False, "too short")


def test_validation_does_not_touch_history():
    validator = LexiconValidator()
    history = ["train"]
    validator.validate("nest", history)
    assert history == ["train"]


def test_dictionary_rejects_unknown_words():
    validator = LexiconValidator(["train", "nest"])
    assert validator.dictionary_available
    assert validator.validate("Train", []) == (True, "")
    assert validator.validate("trzzn", []) == (False, "not a valid word")


def test_missing_dictionary_degrades_to_accept(tmp_path):
    validator = LexiconValidator.from_path(str(tmp_path / "missing.json"))
    assert not validator.dictionary_available
    assert validator.validate("qwxz", []) == (True, "")


def test_unconfigured_dictionary_degrades_to_accept():
    assert not LexiconValidator.from_path(None).dictionary_available


def test_dictionary_loaded_from_json_and_text(tmp_path):
    json_path = tmp_path / "words.json"
    json_path.write_text(json.dumps(["Apple", "Eagle"]), encoding="utf-8")
    text_path = tmp_path / "words.txt"
    text_path.write_text("apple\n\nEAGLE\n", encoding="utf-8")

    for path in (json_path, text_path):
        validator = LexiconValidator.from_path(str(path))
        assert validator.dictionary_available
        assert validator.validate("eagle", ["apple"]) == (True, "")


def test_malformed_dictionary_degrades_to_accept(tmp_path):
    path = tmp_path / "words.json"
    path.write_text("{not json", encoding="utf-8")
    assert not LexiconValidator.from_path(str(path)).dictionary_available


def test_score_grows_with_length():
    assert score_word("nest", 4) == 1
    assert score_word("train", 4) == 2
    assert score_word("  trains ", 4) == 3
    assert score_word("cat", 3) < score_word("cattle", 3)


def test_repeat_detection_uses_full_case_folding():
    validator = LexiconValidator()
    history = ["Straße", "ende", "eis"]
    assert validator.validate("STRASSE", history) == (False, "word already used")


def test_dictionary_lookup_uses_full_case_folding(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("Straße\n", encoding="utf-8")
    validator = LexiconValidator.from_path(str(path))
    assert validator.validate("STRASSE", []) == (True, "")
    assert LexiconValidator(["STRASSE"]).validate("straße", []) == (True, "")


def test_length_is_measured_before_case_folding():
    validator = LexiconValidator()
    # "groß" folds to five characters but is only four long
    assert validator.validate("groß", [], min_length=5) == (False, "too short")
