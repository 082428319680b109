"""Print the description and argument vector of a sample use_aws call."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from use_aws_mcp.command.builder import build_invocation, render_description
from use_aws_mcp.domain.invocation import ToolRequest
from use_aws_mcp.policy.classifier import SafetyClassifier

request = ToolRequest(
    service_name="s3",
    operation_name="list-buckets",
    parameters={"max-items": "10", "query": "Buckets[].Name"},
    region="us-west-2",
    profile_name="development",
    label="List S3 buckets with query",
)
classifier = SafetyClassifier()
descriptor = build_invocation(request, classifier=classifier)

print(render_description(request, read_only=descriptor.is_read_only))
print()
print("argv:", " ".join(descriptor.argv))
if descriptor.is_read_only:
    print("This command is read-only (no acceptance required)")
else:
    print("This command requires user acceptance (write operation)")
