"""Prompt templates for question condensation and grounded answering."""

from langchain_core.prompts import PromptTemplate

from ragdesk.core.errors import ConfigurationError

ORGANISATION_DEFAULT = "the TUM Help Desk for the School of Management"

CONDENSE_QUESTION_TEMPLATE_DEFAULT = """Given the following conversation and a follow up question, rephrase the follow up question to be a standalone question, in its original language.

Chat History:
{chat_history}
Follow Up Input: {question}
Standalone question:"""  # noqa: E501

ANSWER_TEMPLATE_DEFAULT = """You are the direct representative of {organisation}.
The student is reaching out to you regarding their question. If you feel like you need more information (degree program, semester, etc.) to answer the question, please ask the student for it. Be helpful and direct, without unnecessary information.
Answer the question based only on the following context:

{context}

Question: {question}
"""  # noqa: E501

CONDENSE_VARIABLES = frozenset({"chat_history", "question"})
ANSWER_VARIABLES = frozenset({"context", "question"})


def _compile(template: str, required: frozenset[str], name: str) -> PromptTemplate:
    try:
        prompt = PromptTemplate.from_template(template)
    except (ValueError, KeyError) as exc:
        raise ConfigurationError(f"Invalid {name} template: {exc}") from exc
    missing = required - set(prompt.input_variables)
    if missing:
        raise ConfigurationError(
            f"{name} template is missing placeholders: {sorted(missing)}"
        )
    return prompt


def _reject_unknown(prompt: PromptTemplate, allowed: frozenset[str], name: str) -> None:
    unexpected = set(prompt.input_variables) - allowed
    if unexpected:
        raise ConfigurationError(
            f"{name} template has unknown placeholders: {sorted(unexpected)}"
        )


class PromptTemplates:
    """The two fixed prompts of the pipeline, validated on construction."""

    def __init__(
        self,
        condense_question_template: str = CONDENSE_QUESTION_TEMPLATE_DEFAULT,
        answer_template: str = ANSWER_TEMPLATE_DEFAULT,
        organisation: str = ORGANISATION_DEFAULT,
    ) -> None:
        self._condense = _compile(
            condense_question_template, CONDENSE_VARIABLES, "condense question"
        )
        _reject_unknown(self._condense, CONDENSE_VARIABLES, "condense question")

        answer = _compile(answer_template, ANSWER_VARIABLES, "answer")
        # {organisation} is optional and bound once here.
        if "organisation" in answer.input_variables:
            answer = answer.partial(organisation=organisation)
        _reject_unknown(answer, ANSWER_VARIABLES, "answer")
        self._answer = answer

    def render_condense_prompt(self, question: str, chat_history: str) -> str:
        return self._condense.format(chat_history=chat_history, question=question)

    def render_answer_prompt(self, question: str, context: str) -> str:
        return self._answer.format(context=context, question=question)
