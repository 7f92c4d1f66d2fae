"""HTTP and WebSocket front end for the dispatch simulation."""
