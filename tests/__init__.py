"""
Tests for the QA Agent.

Test modules:
- test_workflows: Tests for the CLI workflows and engine
- unit/test_ac_parser: Tests for acceptance criteria parsing
- unit/test_step_classifier: Tests for action and verification classification
- unit/test_playwright_generator: Tests for script generation
- unit/test_test_runner: Tests for live execution against a fake browser
- unit/test_memory_store: Tests for the JSON memory store
- unit/test_validator: Tests for test case validation
- integration/test_ado_integration: Tests for Azure DevOps access with mocked HTTP
"""
