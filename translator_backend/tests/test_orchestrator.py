import concurrent.futures
import unittest
from unittest.mock import MagicMock, patch

import requests

from translator_backend.config.settings import Settings
from translator_backend.models.record_models import TranslationRecord
from translator_backend.models.submission_models import Mode, Stage, SubmissionState, TranslationRequest
from translator_backend.services.errors import PersistenceError, ProviderError, UnsupportedLanguage, ValidationError
from translator_backend.services.orchestrator_service import TranslationOrchestrator, parse_rating
from translator_backend.services.provider_client_service import ProviderAdapter
from translator_backend.services.relay_client_service import RelayClient

SETTINGS = Settings(raw={"api_keys": {"openai": "sk-test", "google": "g-test"}})


class OrchestratorTestCase(unittest.TestCase):
    def setUp(self):
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=4)
        self.addCleanup(self.executor.shutdown)
        self.adapter = MagicMock(spec=ProviderAdapter)
        self.adapter.translate.side_effect = lambda model, language, text: f"{model}:{language}:{text}"
        self.adapter.rate.return_value = "7"
        self.relay = MagicMock(spec=RelayClient)
        self.orchestrator = TranslationOrchestrator(
            self.adapter, relay=self.relay, executor=self.executor, settings=SETTINGS
        )


class TestParseRating(unittest.TestCase):
    def test_values(self):
        self.assertEqual(parse_rating("7"), 7)
        self.assertEqual(parse_rating(" 8/10"), 8)
        self.assertEqual(parse_rating("10"), 10)
        self.assertIsNone(parse_rating("excellent"))
        self.assertIsNone(parse_rating(""))
        self.assertIsNone(parse_rating(None))
        self.assertIsNone(parse_rating("0"))
        self.assertIsNone(parse_rating("11"))


class TestSubmissionFlow(OrchestratorTestCase):
    def test_single_model_single_call(self):
        state = self.orchestrator.submit(TranslationRequest(original_text="Hello", target_language="Hindi"))

        self.assertEqual(state.stage, Stage.DONE)
        self.adapter.translate.assert_called_once_with("gpt-3.5-turbo", "Hindi", "Hello")
        self.adapter.correct.assert_not_called()
        self.adapter.rate.assert_not_called()
        self.relay.save.assert_not_called()
        self.assertEqual(state.translations, {"gpt-3.5-turbo": "gpt-3.5-turbo:Hindi:Hello"})
        self.assertIsNone(state.result_map["gpt-3.5-turbo"].rating)

    def test_rating_mode_translates_and_rates_each_model(self):
        models = ("gpt-4", "gemini-1.5-flash", "Default")
        request = TranslationRequest(
            original_text="Hello", target_language="French", rating_enabled=True, selected_models=models
        )

        state = self.orchestrator.submit(request)

        self.assertEqual(self.adapter.translate.call_count, 3)
        self.assertEqual(self.adapter.rate.call_count, 3)
        self.assertEqual(list(state.translations), list(models))
        self.assertEqual(state.ratings, {m: 7 for m in models})

    def test_empty_message_never_calls_providers(self):
        for text in ("", "   "):
            with self.assertRaises(ValidationError):
                self.orchestrator.submit(TranslationRequest(original_text=text, target_language="English"))
        self.adapter.translate.assert_not_called()
        self.adapter.correct.assert_not_called()
        self.relay.save.assert_not_called()

    def test_deepl_with_unsupported_language(self):
        request = TranslationRequest(original_text="Hello", target_language="Hindi", model="Default")
        state = self.orchestrator.run(request)

        self.assertEqual(state.stage, Stage.FAILED)
        self.assertIsInstance(state.error, UnsupportedLanguage)
        self.adapter.translate.assert_not_called()

    def test_unknown_model_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.orchestrator.submit(TranslationRequest(original_text="Hello", target_language="German", model="llama"))

    def test_non_numeric_rating_stores_none(self):
        self.adapter.rate.return_value = "Very good"
        request = TranslationRequest(
            original_text="Hello", target_language="German", rating_enabled=True, selected_models=("gpt-4",)
        )
        state = self.orchestrator.submit(request)
        self.assertEqual(state.stage, Stage.DONE)
        self.assertEqual(state.ratings, {"gpt-4": None})

    def test_rating_failure_keeps_translation(self):
        self.adapter.rate.side_effect = ProviderError("openai", "rate limited")
        request = TranslationRequest(
            original_text="Hello", target_language="German", rating_enabled=True, selected_models=("gpt-4",)
        )
        state = self.orchestrator.submit(request)
        self.assertEqual(state.stage, Stage.DONE)
        self.assertEqual(state.translations, {"gpt-4": "gpt-4:German:Hello"})
        self.assertEqual(state.ratings, {"gpt-4": None})
        self.assertIn("rating:gpt-4", dict(state.errors))

    def test_one_failing_model_does_not_abort_the_others(self):
        def translate(model, language, text):
            if model == "gemini-1.5-flash":
                raise ProviderError("google", "quota exceeded")
            return f"{model}-ok"

        self.adapter.translate.side_effect = translate
        request = TranslationRequest(
            original_text="Hello",
            target_language="Spanish",
            rating_enabled=True,
            selected_models=("gpt-4", "gemini-1.5-flash", "Default"),
        )
        state = self.orchestrator.submit(request)

        self.assertEqual(state.stage, Stage.DONE)
        self.assertEqual(state.translations, {"gpt-4": "gpt-4-ok", "Default": "Default-ok"})
        self.assertEqual(dict(state.errors)["gemini-1.5-flash"], "[google] quota exceeded")
        self.assertEqual(self.adapter.rate.call_count, 2)

    def test_unexpected_error_stays_with_its_model(self):
        def translate(model, language, text):
            if model == "gpt-4":
                raise AttributeError("'str' object has no attribute 'get'")
            return f"{model}-ok"

        self.adapter.translate.side_effect = translate
        request = TranslationRequest(
            original_text="Hello",
            target_language="German",
            rating_enabled=True,
            selected_models=("gpt-4", "gemini-1.5-flash"),
        )
        state = self.orchestrator.submit(request)

        self.assertEqual(state.stage, Stage.DONE)
        self.assertEqual(state.translations, {"gemini-1.5-flash": "gemini-1.5-flash-ok"})
        self.assertIn("Unexpected error", dict(state.errors)["gpt-4"])

    def test_all_models_failing_fails_submission(self):
        self.adapter.translate.side_effect = ProviderError("openai", "down")
        state = self.orchestrator.run(TranslationRequest(original_text="Hello", target_language="Japanese"))

        self.assertEqual(state.stage, Stage.FAILED)
        self.assertIsInstance(state.error, ProviderError)
        with self.assertRaises(ProviderError):
            self.orchestrator.submit(TranslationRequest(original_text="Hello", target_language="Japanese"))

    def test_rating_mode_with_no_selection_is_a_no_op(self):
        request = TranslationRequest(
            original_text="Hello", target_language="English", rating_enabled=True, persist_enabled=True
        )
        state = self.orchestrator.submit(request)

        self.assertEqual(state.stage, Stage.DONE)
        self.assertEqual(state.results, ())
        self.adapter.translate.assert_not_called()
        self.adapter.rate.assert_not_called()
        self.relay.save.assert_not_called()


class TestCorrection(OrchestratorTestCase):
    def test_corrected_text_is_translated(self):
        self.adapter.correct.return_value = "I am going home."
        request = TranslationRequest(original_text="i going home", target_language="English", mode=Mode.CORRECT)

        state = self.orchestrator.submit(request)

        self.adapter.correct.assert_called_once_with("i going home", "English")
        self.adapter.translate.assert_called_once_with("gpt-3.5-turbo", "English", "I am going home.")
        self.assertEqual(state.text, "I am going home.")

    def test_correction_failure_aborts(self):
        self.adapter.correct.side_effect = ProviderError("openai", "invalid key")
        request = TranslationRequest(original_text="i going home", target_language="English", mode=Mode.CORRECT)

        state = self.orchestrator.run(request)

        self.assertEqual(state.stage, Stage.FAILED)
        self.assertEqual(str(state.error), "[openai] invalid key")
        self.adapter.translate.assert_not_called()


class TestPersistence(OrchestratorTestCase):
    def test_record_sent_once(self):
        self.adapter.correct.return_value = "Hello there."
        request = TranslationRequest(
            original_text="hello ther",
            target_language="German",
            model="gpt-4",
            mode=Mode.CORRECT,
            rating_enabled=True,
            persist_enabled=True,
            selected_models=("gpt-4", "Default"),
        )
        state = self.orchestrator.submit(request)

        self.assertTrue(state.persisted)
        self.relay.save.assert_called_once()
        record = self.relay.save.call_args.args[0]
        self.assertIsInstance(record, TranslationRecord)
        self.assertEqual(record.original_text, "hello ther")
        self.assertEqual(record.translated_text, {
            "gpt-4": "gpt-4:German:Hello there.",
            "Default": "Default:German:Hello there.",
        })
        self.assertEqual(record.language, "German")
        self.assertEqual(record.model, "gpt-4")
        self.assertEqual(record.rating_number, 7)
        self.assertEqual(record.ratings, {"gpt-4": 7, "Default": 7})

    def test_persistence_failure_keeps_results(self):
        self.relay.save.side_effect = PersistenceError("Failed to save translation: 500")
        request = TranslationRequest(original_text="Hello", target_language="French", persist_enabled=True)

        state = self.orchestrator.submit(request)

        self.assertEqual(state.stage, Stage.DONE)
        self.assertFalse(state.persisted)
        self.assertIn("Failed to save translation", state.persist_error)
        self.assertEqual(state.translations, {"gpt-3.5-turbo": "gpt-3.5-turbo:French:Hello"})


class TestStateIsImmutable(OrchestratorTestCase):
    def test_steps_return_new_states(self):
        start = SubmissionState.start(TranslationRequest(original_text="Hello", target_language="Hindi"))
        validated = self.orchestrator.validate(start)
        translated = self.orchestrator.translate(validated)

        self.assertIsNot(translated, start)
        self.assertEqual(start.stage, Stage.IDLE)
        self.assertEqual(start.results, ())
        self.assertEqual(translated.stage, Stage.TRANSLATING)
        self.assertEqual(len(translated.results), 1)


class TestPinnedRatingModel(unittest.TestCase):
    """Rating calls always hit the pinned chat model, whatever produced the translation."""

    def test_rating_calls_are_pinned(self):
        env = patch.dict("os.environ", {}, clear=True)
        env.start()
        self.addCleanup(env.stop)

        def chat(url, **kwargs):
            payload = kwargs["json"]
            resp = MagicMock(status_code=200, ok=True)
            content = "9" if payload["max_tokens"] == 10 else "Hallo"
            resp.json.return_value = {"choices": [{"message": {"content": content}}]}
            return resp

        google = MagicMock(status_code=200, ok=True)
        google.json.return_value = {"candidates": [{"content": {"parts": [{"text": "Hallo"}]}}]}
        deepl = MagicMock(status_code=200, ok=True)
        deepl.json.return_value = {"translation": "Hallo"}

        sessions = {name: MagicMock(spec=requests.Session) for name in ("openai", "google", "deepl")}
        sessions["openai"].post.side_effect = chat
        sessions["google"].post.return_value = google
        sessions["deepl"].post.return_value = deepl

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=2)
        self.addCleanup(executor.shutdown)
        orchestrator = TranslationOrchestrator(
            ProviderAdapter(settings=SETTINGS, sessions=sessions),
            relay=MagicMock(spec=RelayClient),
            executor=executor,
            settings=SETTINGS,
        )
        request = TranslationRequest(
            original_text="Hello",
            target_language="German",
            rating_enabled=True,
            selected_models=("gemini-1.5-flash", "Default", "gpt-4"),
        )

        state = orchestrator.submit(request)

        rate_calls = [c for c in sessions["openai"].post.call_args_list if c.kwargs["json"]["max_tokens"] == 10]
        translate_calls = [c for c in sessions["openai"].post.call_args_list if c.kwargs["json"]["max_tokens"] == 100]
        self.assertEqual(len(rate_calls), 3)
        self.assertTrue(all(c.kwargs["json"]["model"] == "gpt-3.5-turbo" for c in rate_calls))
        self.assertEqual([c.kwargs["json"]["model"] for c in translate_calls], ["gpt-4"])
        self.assertEqual(sessions["google"].post.call_count, 1)
        self.assertEqual(sessions["deepl"].post.call_count, 1)
        self.assertEqual(state.ratings, {"gemini-1.5-flash": 9, "Default": 9, "gpt-4": 9})


if __name__ == "__main__":
    unittest.main()
