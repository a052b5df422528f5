"""
Scene — rendering collaborator boundary

- SceneGraph: template lookup, instantiation, parenting and transforms
- StatusSink: single line of status text shown to the user
- InMemoryScene / RecordingStatusSink: headless implementations used by the
  simulation service and the test-suite
"""
