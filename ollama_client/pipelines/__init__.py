"""Package reserved for function-calling pipelines; it holds no modules."""