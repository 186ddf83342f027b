from task_console.models import ExecutionAck, Task


def test_task_from_wire_format():
    task = Task.model_validate(
        {
            "id": "1",
            "name": "build",
            "owner": "alice",
            "command": "make",
            "taskExecutions": [
                {"startTime": "t0", "endTime": "t1", "output": "first"},
                {"startTime": [2024, 1, 2, 3, 4], "endTime": None, "output": "second"},
            ],
        }
    )
    assert task.last_execution.output == "second"
    assert task.last_execution.start_time == [2024, 1, 2, 3, 4]


def test_empty_history_has_no_last_execution():
    assert Task(id="1").last_execution is None


def test_payload_uses_camel_case():
    payload = Task(id="1", name="n", owner="o", command="c").to_payload()
    assert payload == {
        "id": "1",
        "name": "n",
        "owner": "o",
        "command": "c",
        "taskExecutions": [],
    }


def test_missing_fields():
    assert Task().missing_fields() == ["id", "name", "owner", "command"]
    assert Task(id="1", name="n", owner="o", command="c").missing_fields() == []


def test_execution_ack_keeps_extra_keys():
    ack = ExecutionAck.model_validate({"id": 7, "status": "started"})
    assert ack.id == "7"
    assert ack.model_extra == {"status": "started"}


def test_null_history_and_output_are_empty():
    task = Task.model_validate(
        {"id": "1", "name": "n", "owner": None, "command": "c", "taskExecutions": None}
    )
    assert task.task_executions == []
    assert task.owner == ""
    assert task.last_execution is None

    ran = Task.model_validate(
        {"id": "2", "name": "n", "owner": "o", "command": "c",
         "taskExecutions": [{"startTime": "t0", "endTime": None, "output": None}]}
    )
    assert ran.last_execution.output == ""
