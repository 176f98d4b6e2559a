"""Test doubles for the model gateway, schema source and sampler."""
import json

from models.chat import ChatCompletionResponse


def tool_call(call_id, table="users", num_rows=5, name="sampleTable", arguments=None):
    if arguments is None:
        arguments = json.dumps({"tableName": table, "numRows": num_rows})
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


def tool_reply(*calls):
    return {"role": "assistant", "content": None, "tool_calls": list(calls)}


def content_reply(content):
    return {"role": "assistant", "content": content}


class StubGateway:
    """Replays canned assistant messages and records every request it receives."""

    def __init__(self, replies=(), healthy=True):
        self.replies = list(replies)
        self.requests = []
        self.healthy = healthy

    def is_healthy(self):
        return (True, "stub-model") if self.healthy else (False, "connection refused")

    def close(self):
        pass

    def chat_completion(self, request):
        self.requests.append(request.model_dump(exclude_none=True))
        if not self.replies:
            raise AssertionError("Unexpected extra gateway call")
        return ChatCompletionResponse.model_validate(
            {"id": f"gen-{len(self.requests)}", "choices": [{"message": self.replies.pop(0), "finish_reason": "stop"}]}
        )


class StubSchemaSource:
    def __init__(self, text="## Tables\n### users (10 rows)\n#### Columns:\n- id: INTEGER [PRIMARY KEY]\n"):
        self.text = text
        self.calls = []

    def get_formatted_schema(self, connection_string):
        self.calls.append(connection_string)
        return self.text


class StubSampler:
    def __init__(self, rows=None):
        self.rows = rows if rows is not None else [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]
        self.calls = []

    def sample_table(self, table_name, num_rows, connection_string):
        self.calls.append((table_name, num_rows, connection_string))
        return self.rows
