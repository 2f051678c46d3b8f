from langchain_core.prompts import ChatPromptTemplate


# Prompt for answering from the retrieved document chunks.
# The user-editable instructions are passed as a variable, so braces typed by
# the user are never parsed as template fields.
document_qa_prompt = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            (
                "{instructions}\n\n"
                "Here are the uploaded documents for reference:\n\n"
                "{context}\n\n"
                "Please answer questions based on this content."
            ),
        ),
        ("human", "{input}"),
    ]
)


# Separator placed between retrieved chunks inside {context}
CONTEXT_SEPARATOR = "\n\n---\n\n"

# Used when retrieval comes back empty
NO_CONTEXT_TEXT = "(No relevant document excerpts were found for this question.)"


# Central dictionary to register prompts
PROMPT_REGISTRY = {
    "document_qa": document_qa_prompt,
}
